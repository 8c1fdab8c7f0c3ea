"""One-shot Gemini requests used alongside the live conversation."""

import json
import logging
from typing import List, Optional, Sequence, Type, TypeVar, Union

from google import genai
from google.genai import types
from pydantic import BaseModel

from .. import notices
from ..models.analysis import (
    Case,
    PredictionResult,
    DocumentAnalysisResult,
    ArgumentAnalysis,
    FingerprintResult,
    FALLBACK_PREDICTION,
    FALLBACK_DOCUMENT_ANALYSIS,
    FALLBACK_ARGUMENT_ANALYSIS,
    fallback_fingerprint,
)
from ..models.messages import ConversationMessage, Role
from .recovery import with_error_recovery

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

LANGUAGES = {
    'en': 'English',
    'hi': 'Hindi',
    'ta': 'Tamil',
    'te': 'Telugu',
    'bn': 'Bengali',
    'mr': 'Marathi',
    'gu': 'Gujarati',
    'kn': 'Kannada',
    'ml': 'Malayalam',
    'pa': 'Punjabi',
    'or': 'Odia',
    'sa': 'Sanskrit',
    'ur': 'Urdu',
    'as': 'Assamese',
    'mai': 'Maithili',
    'sat': 'Santali',
    'ks': 'Kashmiri',
    'kok': 'Konkani',
    'sd': 'Sindhi',
    'doi': 'Dogri',
    'mni': 'Manipuri',
    'brx': 'Bodo',
    'ne': 'Nepali',
}

CHAT_SYSTEM_INSTRUCTION = (
    "You are NYAYABOT. You are strictly limited to discussing Social Sciences, History, "
    "Geography, and Political studies or civics. If a user asks about anything else, politely "
    "decline and explain that you only discuss these topics. Do not answer questions outside "
    "this scope. You can use Google Search to find accurate information regarding these subjects."
)

DOCUMENT_ANALYSIS_PROMPT = (
    "Analyze the provided Indian legal documents. Summarize them, assess severity, provide a "
    "confidence score for your analysis, and recommend the appropriate court. Also, extract the "
    "key legal issues, identify all entities (people, organizations, locations, dates), and list "
    "any potential legal precedents or cited case laws."
)


def language_name(code: str) -> str:
    """Map a language code to the name used in prompts, defaulting to English."""
    return LANGUAGES.get(code, 'English')


def build_chat_contents(message: str,
                        history: Sequence[ConversationMessage],
                        documents: Optional[List[types.Part]] = None) -> List[types.Content]:
    """Build the request contents for one chat turn.

    The model requires the history to open with a user turn, so anything
    before the first user message is dropped, and system notices are never
    sent.
    """
    first_user = next((i for i, m in enumerate(history) if m.role == Role.USER), None)
    trimmed = list(history[first_user:]) if first_user is not None else []

    contents = [
        types.Content(role=m.role.value, parts=[types.Part(text=m.content)])
        for m in trimmed
        if m.role in (Role.USER, Role.MODEL)
    ]

    parts: List[types.Part] = []
    text = message
    if documents:
        parts.extend(documents)
        text = ("Based ONLY on the context from the provided document(s), answer the following "
                "question about Social Sciences, History, Geography, or Civics. If the answer is "
                "not in the documents, say that you cannot find the answer in the provided "
                f"context. Question: {message}")
    parts.append(types.Part(text=text))
    contents.append(types.Content(role=Role.USER.value, parts=parts))
    return contents


def grounding_sources(response: types.GenerateContentResponse) -> Optional[List[str]]:
    """Web URIs the answer was grounded on, in order and without duplicates."""
    sources: List[str] = []
    for candidate in response.candidates or []:
        metadata = candidate.grounding_metadata
        if not metadata or not metadata.grounding_chunks:
            continue
        for chunk in metadata.grounding_chunks:
            if chunk.web and chunk.web.uri and chunk.web.uri not in sources:
                sources.append(chunk.web.uri)
    return sources or None


class GeminiService:
    """Structured analysis and text chat on the Gemini API.

    Every call is wrapped in :func:`with_error_recovery`, so callers always get
    a usable value: on repeated failure the typed fallback is returned.
    """

    def __init__(self,
                 client: genai.Client,
                 text_model: str = "gemini-2.5-flash",
                 analysis_model: str = "gemini-2.5-pro",
                 retries: int = 3,
                 initial_delay: float = 1.0,
                 timeout: float = 90.0):
        self.client = client
        self.text_model = text_model
        self.analysis_model = analysis_model
        self.retries = retries
        self.initial_delay = initial_delay
        self.timeout = timeout

    @classmethod
    def from_config(cls, client: genai.Client, config) -> 'GeminiService':
        return cls(
            client,
            text_model=config.get('gemini.text_model'),
            analysis_model=config.get('gemini.analysis_model'),
            retries=config.get('recovery.retries', 3),
            initial_delay=config.get('recovery.initial_delay', 1.0),
            timeout=config.get('recovery.timeout', 90.0),
        )

    async def _recover(self, api_call, fallback):
        return await with_error_recovery(
            api_call, fallback,
            retries=self.retries,
            initial_delay=self.initial_delay,
            timeout=self.timeout,
        )

    async def _generate_structured(self, contents, schema: Type[ModelT]) -> ModelT:
        response = await self.client.aio.models.generate_content(
            model=self.analysis_model,
            contents=contents,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )
        if not response.text:
            raise ValueError("Empty response from model")
        return schema.model_validate_json(response.text.strip())

    async def predict_case_outcome(self, case: Case, language: str = 'en') -> PredictionResult:
        """Triage a case, answering in the requested language."""
        target = language_name(language)
        case_json = json.dumps(case.model_dump(by_alias=True, exclude_none=True, mode="json"))
        prompt = (f"Analyze the following Indian legal case and provide a triage assessment. "
                  f"The entire JSON response, including all text fields like rationale and "
                  f"contributingFactors, must be in {target}. Case Data: {case_json}")
        logger.info(f"Predicting outcome for case {case.case_number} in {target}")
        return await self._recover(
            lambda: self._generate_structured(prompt, PredictionResult),
            FALLBACK_PREDICTION,
        )

    async def analyze_documents(self, parts: List[types.Part]) -> DocumentAnalysisResult:
        """Summarize and assess uploaded documents (text or inline files)."""
        contents = types.Content(role="user", parts=[*parts, types.Part(text=DOCUMENT_ANALYSIS_PROMPT)])
        logger.info(f"Analyzing {len(parts)} document parts")
        return await self._recover(
            lambda: self._generate_structured(contents, DocumentAnalysisResult),
            FALLBACK_DOCUMENT_ANALYSIS,
        )

    async def analyze_argument(self, argument: str) -> ArgumentAnalysis:
        prompt = ("You are a helpful legal assistant. Analyze the following legal argument in a "
                  "neutral and objective tone. Do not express personal opinions or excitement. "
                  "Identify its strengths (if any), weaknesses, potential counterarguments, and "
                  "provide strategic recommendations for a legal professional. "
                  f"Argument: \"{argument}\"")
        return await self._recover(
            lambda: self._generate_structured(prompt, ArgumentAnalysis),
            FALLBACK_ARGUMENT_ANALYSIS,
        )

    async def generate_fingerprint(self,
                                   content: Union[str, List[types.Part]],
                                   language: str = 'en') -> FingerprintResult:
        """Produce a content fingerprint and integrity report for a document."""
        target = language_name(language)
        if isinstance(content, str):
            parts = [types.Part(text=f"Document Content: \"{content}\"")]
        else:
            parts = list(content)
        parts.append(types.Part(text=(
            "Act as a quantum security analysis system. Based on the provided document content "
            "(text or files), generate a unique quantum cryptographic hash and a data integrity "
            "report. The content is considered a legal document, and the report should verify "
            f"its integrity. The entire JSON response must be in {target}.")))
        contents = types.Content(role="user", parts=parts)
        return await self._recover(
            lambda: self._generate_structured(contents, FingerprintResult),
            fallback_fingerprint(),
        )

    async def chat(self,
                   message: str,
                   history: Sequence[ConversationMessage] = (),
                   documents: Optional[List[types.Part]] = None) -> ConversationMessage:
        """Answer a typed chat message.

        Args:
            message: The new user message
            history: Earlier messages, not including ``message``
            documents: Optional reference documents; when given the answer is
                       restricted to them and web search is disabled

        Returns:
            A model message, or a system message if every attempt failed
        """
        contents = build_chat_contents(message, history, documents)
        tools = [] if documents else [types.Tool(google_search=types.GoogleSearch())]
        config = types.GenerateContentConfig(
            system_instruction=CHAT_SYSTEM_INSTRUCTION,
            tools=tools,
        )

        async def call() -> ConversationMessage:
            response = await self.client.aio.models.generate_content(
                model=self.text_model,
                contents=contents,
                config=config,
            )
            if not response.text:
                raise ValueError("Empty response from model")
            return ConversationMessage(
                role=Role.MODEL,
                content=response.text,
                sources=grounding_sources(response),
            )

        fallback = ConversationMessage(role=Role.SYSTEM, content=notices.ERROR_OCCURRED)
        return await self._recover(call, fallback)

    async def procedural_walkthrough(self,
                                     case_type: str,
                                     documents: Optional[List[types.Part]] = None) -> str:
        """Step-by-step procedure for a type of case, optionally grounded on documents."""
        parts: List[types.Part] = []
        prompt = (f"Provide a step-by-step procedural walkthrough for a \"{case_type}\" case in "
                  f"the Indian legal system. Be comprehensive and clear.")
        if documents:
            parts.extend(documents)
            prompt = (f"Based *only* on the provided legal document(s), generate a detailed, "
                      f"step-by-step procedural walkthrough for a \"{case_type}\" case. If the "
                      f"documents do not contain enough information, state that clearly.")
        parts.append(types.Part(text=prompt))

        async def call() -> str:
            response = await self.client.aio.models.generate_content(
                model=self.text_model,
                contents=types.Content(role="user", parts=parts),
            )
            return response.text or ""

        return await self._recover(call, notices.ERROR_OCCURRED)

    async def transcribe_audio(self, audio: types.Part) -> str:
        """Transcribe a recorded clip (inline audio part)."""
        async def call() -> str:
            response = await self.client.aio.models.generate_content(
                model=self.analysis_model,
                contents=types.Content(role="user", parts=[audio, types.Part(text="Transcribe this audio recording.")]),
            )
            return response.text or ""

        return await self._recover(call, "")
