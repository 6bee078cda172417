"""Impact classification endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from impact_tracker.models.domain import ClassificationResult, ClassifyRequest
from impact_tracker.services.classifier import ImpactClassifier, get_classifier

router = APIRouter(prefix="/ai", tags=["ai"])


# PUBLIC_INTERFACE
@router.post("/classify", response_model=ClassificationResult, summary="Classify impact text", description="Suggest a category, craft skills and metrics for a description.")
def classify(payload: ClassifyRequest, classifier: ImpactClassifier = Depends(get_classifier)):
    """Classify free text."""
    return classifier.classify(payload.description, job_family=payload.job_family)
