"""Pydantic models for API outputs plus the shared extraction schema.

Layers / roles:
    WorkerProfile      : The 30 fields every extraction route returns (all optional strings).
    ExtractionSchema   : Ordered, unique field list the normalizer enforces.
    ALLOWED_VALUES     : Closed value lists the prompt asks the model to pick from.
    ExtractionResponse : Public success shape, {"jsonResponse": WorkerProfile}.
    PromptRequest      : JSON body for the raw-text route.
    ProcessorState     : Document AI processor status returned by /processor routes.
    ErrorEnvelope      : Error body for malformed model output.

Field names are a wire contract with the recruitment-office frontend; they are
kept verbatim (including ``ArabicLanguageLeveL``).
"""

from typing import Dict, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


class WorkerProfile(BaseModel):
    """Flat worker CV / passport record. Missing values are null."""

    # Declaration order is the output key order.
    Name: Optional[str] = None
    Religion: Optional[str] = None
    Passportnumber: Optional[str] = None
    ExperienceYears: Optional[str] = None
    maritalstatus: Optional[str] = None
    Experience: Optional[str] = None
    dateofbirth: Optional[str] = None
    Nationality: Optional[str] = None
    job: Optional[str] = None
    Education: Optional[str] = None
    EnglishLanguageLevel: Optional[str] = None
    ArabicLanguageLeveL: Optional[str] = None
    SewingLevel: Optional[str] = None
    weight: Optional[str] = None
    height: Optional[str] = None
    childrencount: Optional[str] = None
    CleaningLevel: Optional[str] = None
    CookingLevel: Optional[str] = None
    WashingLevel: Optional[str] = None
    IroningLevel: Optional[str] = None
    ChildcareLevel: Optional[str] = None
    ElderlycareLevel: Optional[str] = None
    phone: Optional[str] = None
    age: Optional[str] = None
    officeName: Optional[str] = None
    experienceType: Optional[str] = None
    PassportStart: Optional[str] = None  # ISO date
    PassportEnd: Optional[str] = None  # ISO date
    Salary: Optional[str] = None
    BabySitterLevel: Optional[str] = None


class ExtractionSchema(BaseModel):
    """Ordered set of field names the normalized output must contain exactly."""

    model_config = ConfigDict(frozen=True)

    fields: Tuple[str, ...]

    @field_validator("fields")
    @classmethod
    def _unique_non_empty(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        seen = set()
        for name in value:
            if not name or not name.strip():
                raise ValueError("field names must be non-empty")
            if name in seen:
                raise ValueError(f"duplicate field name: {name}")
            seen.add(name)
        return value

    @classmethod
    def from_model(cls, model: type[BaseModel]) -> "ExtractionSchema":
        return cls(fields=tuple(model.model_fields.keys()))


WORKER_SCHEMA = ExtractionSchema.from_model(WorkerProfile)


# ---- Allowed values (closed lists, used verbatim in prompts) ----

EDUCATION_LEVELS = (
    "Diploma - دبلوم",
    "High school - ثانوي",
    "Illiterate - غير متعلم",
    "Literate - القراءة والكتابة",
    "Primary school - ابتدائي",
    "University level - جامعي",
)

EXPERIENCE_LEVELS = (
    "Novice | مدربة بدون خبرة",
    "Intermediate | مدربة بخبرة متوسطة",
    "Well-experienced | خبرة جيدة",
    "Expert | خبرة ممتازة",
)

# ExperienceYears is derived from Experience, not read independently
EXPERIENCE_YEARS: Dict[str, str] = {
    "Novice | مدربة بدون خبرة": "مدربة-Training",
    "Intermediate | مدربة بخبرة متوسطة": "1-2 Years - سنوات",
    "Well-experienced | خبرة جيدة": "3-4 Years - سنوات",
    "Expert | خبرة ممتازة": "5 and More - وأكثر",
}

MARITAL_STATUSES = (
    "Single - عازبة",
    "Married - متزوجة",
    "Divorced - مطلقة",
)

RELIGIONS = (
    "Islam - الإسلام",
    "Non-Muslim - غير مسلم",
)

PROFICIENCY_LEVELS = (
    "Expert - ممتاز",
    "Advanced - جيد جداً",
    "Intermediate - جيد",
    "Beginner - مبتدأ",
    "Non - لا تجيد",
)

NATIONALITIES = (
    "Uganda - أوغندا",
    "Ethiopia - إثيوبيا",
    "Kenya - كينيا",
    "Bengladesh - بنغلادش",
    "Philippines - الفلبين",
)

LANGUAGE_FIELDS = ("EnglishLanguageLevel", "ArabicLanguageLeveL")
SKILL_FIELDS = (
    "CookingLevel",
    "WashingLevel",
    "IroningLevel",
    "CleaningLevel",
    "SewingLevel",
    "ChildcareLevel",
    "ElderlycareLevel",
    "BabySitterLevel",
)

ALLOWED_VALUES: Dict[str, Tuple[str, ...]] = {
    "Education": EDUCATION_LEVELS,
    "Experience": EXPERIENCE_LEVELS,
    "ExperienceYears": tuple(EXPERIENCE_YEARS.values()),
    "maritalstatus": MARITAL_STATUSES,
    "Religion": RELIGIONS,
    "Nationality": NATIONALITIES,
    **{name: PROFICIENCY_LEVELS for name in LANGUAGE_FIELDS},
    **{name: PROFICIENCY_LEVELS for name in SKILL_FIELDS},
}


# ---- Request / response bodies ----

class ExtractionResponse(BaseModel):
    jsonResponse: WorkerProfile


class PromptRequest(BaseModel):
    """Raw text route body. ``text`` is optional here so the route can answer 400, not 422."""

    text: Optional[str] = None
    model: Optional[str] = Field(None, description="Gemini model override")


class ProcessorState(BaseModel):
    processor: str
    display_name: Optional[str] = None
    state: str


class ErrorEnvelope(BaseModel):
    """Uniform error body for upstream output that could not be normalized.

    details / rawResponse are only populated in diagnostics mode.
    """

    error: str
    details: Optional[str] = None
    rawResponse: Optional[str] = None
