"""Structured results returned by the non-streaming Gemini collaborators.

These pydantic models double as the JSON response schemas sent with each
request, so field names match what the model is asked to produce.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class EntityType(str, Enum):
    PERSON = "PERSON"
    ORGANIZATION = "ORGANIZATION"
    LOCATION = "LOCATION"
    DATE = "DATE"


class IntegrityStatus(str, Enum):
    VERIFIED = "Verified & Secure"
    TAMPERED = "Potential Tampering Detected"


class Case(BaseModel):
    """A legal case as submitted for triage."""
    id: str
    title: str
    case_number: str = Field(alias="caseNumber")
    petitioner: str
    respondent: str
    invoked_acts: List[str] = Field(default_factory=list, alias="invokedActs")
    filing_date: str = Field(alias="filingDate")
    last_hearing_date: str = Field(alias="lastHearingDate")
    complexity_score: float = Field(alias="complexityScore")
    summary: str
    case_type: str = Field(alias="caseType")  # Criminal, Civil, Family, PIL, Divorce
    notes: Optional[str] = None
    priority: Optional[Priority] = None

    model_config = {"populate_by_name": True}


class PredictionResult(BaseModel):
    """Case triage assessment."""
    priority: Priority = Field(description="Priority level of the case (High, Medium, or Low).")
    rationale: str = Field(description="A detailed explanation for the assigned priority.")
    contributing_factors: List[str] = Field(
        alias="contributingFactors",
        description="Top 3-5 factors influencing the priority.")
    legal_citations: List[str] = Field(
        alias="legalCitations",
        description="Relevant legal acts or precedents.")

    model_config = {"populate_by_name": True}


class IdentifiedEntity(BaseModel):
    name: str
    type: EntityType


class DocumentAnalysisResult(BaseModel):
    """Summary and assessment of uploaded legal documents."""
    summary: str = Field(description="A concise summary of the document's content.")
    severity: Priority = Field(description="The severity or urgency of the case based on the document.")
    confidence_score: float = Field(
        alias="confidenceScore",
        description="A score from 0.0 to 1.0 indicating the confidence in the analysis.")
    recommended_court: str = Field(
        alias="recommendedCourt",
        description="The appropriate court in the Indian legal system for this matter.")
    key_legal_issues: List[str] = Field(
        alias="keyLegalIssues",
        description="A list of the main legal questions or points of contention.")
    identified_entities: List[IdentifiedEntity] = Field(
        alias="identifiedEntities",
        description="A list of named entities found in the document.")
    potential_precedents: List[str] = Field(
        alias="potentialPrecedents",
        description="A list of relevant case laws, statutes, or legal precedents mentioned or implied.")

    model_config = {"populate_by_name": True}


class ArgumentAnalysis(BaseModel):
    """Neutral critique of a legal argument."""
    introduction: str = Field(description="A brief, neutral introduction to the analysis of the argument provided.")
    strengths: List[str] = Field(description="Potential strengths or valid points within the argument, if any.")
    weaknesses: List[str] = Field(description="Weaknesses, logical fallacies, or legally unsupported claims.")
    counterarguments: List[str] = Field(description="Potential counterarguments to refute the provided statement.")
    strategic_recommendations: str = Field(
        alias="strategicRecommendations",
        description="Actionable strategic advice for a legal professional on how to address this argument.")

    model_config = {"populate_by_name": True}


class FingerprintResult(BaseModel):
    """Content fingerprint and integrity report for a document."""
    quantum_hash: str = Field(
        alias="quantumHash",
        description="A unique, long, hexadecimal-like string representing the document's fingerprint.")
    integrity_status: IntegrityStatus = Field(
        alias="integrityStatus",
        description="The verification status of the document.")
    anomalies_detected: List[str] = Field(
        alias="anomaliesDetected",
        description="Detected anomalies or inconsistencies. Empty if none.")
    verification_timestamp: str = Field(
        alias="verificationTimestamp",
        description="The ISO 8601 timestamp of when the verification was performed.")

    model_config = {"populate_by_name": True}


FALLBACK_PREDICTION = PredictionResult(
    priority=Priority.MEDIUM,
    rationale="Could not retrieve AI analysis due to a network error. This is a fallback response.",
    contributing_factors=["API communication failure"],
    legal_citations=["N/A"],
)

FALLBACK_DOCUMENT_ANALYSIS = DocumentAnalysisResult(
    summary="Could not analyze document due to an error.",
    severity=Priority.MEDIUM,
    confidence_score=0.0,
    recommended_court="N/A",
    key_legal_issues=["Error retrieving data."],
    identified_entities=[],
    potential_precedents=["N/A"],
)

FALLBACK_ARGUMENT_ANALYSIS = ArgumentAnalysis(
    introduction="Could not analyze the argument due to an error.",
    strengths=[],
    weaknesses=[],
    counterarguments=[],
    strategic_recommendations="N/A",
)


def fallback_fingerprint() -> FingerprintResult:
    """Fallback fingerprint, stamped with the time of the failure."""
    return FingerprintResult(
        quantum_hash="Error generating hash: Fallback response due to API failure.",
        integrity_status=IntegrityStatus.TAMPERED,
        anomalies_detected=["Failed to connect to the quantum verification service."],
        verification_timestamp=datetime.now(timezone.utc).isoformat(),
    )
