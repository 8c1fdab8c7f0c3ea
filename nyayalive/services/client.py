"""Construction of the shared google-genai client."""

import logging

from google import genai
from google.oauth2 import service_account

from ..config import NyayaLiveConfig

logger = logging.getLogger(__name__)

VERTEX_SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


def create_client(config: NyayaLiveConfig) -> genai.Client:
    """Build a Gemini client from configuration.

    A configured Vertex AI service account takes precedence; otherwise the
    Gemini API key is used.

    Raises:
        ValueError: If neither Vertex credentials nor an API key is configured
    """
    credentials_path = config.get_vertex_credentials_path()
    if credentials_path:
        logger.info(f"Loading Vertex AI credentials from: {credentials_path}")
        credentials = service_account.Credentials.from_service_account_file(
            credentials_path, scopes=VERTEX_SCOPES)
        project = config.get('gemini.vertex.project') or credentials.project_id
        location = config.get('gemini.vertex.location', 'us-central1')
        logger.info(f"Using Vertex AI project {project} in {location}")
        return genai.Client(vertexai=True, project=project, location=location, credentials=credentials)

    api_key = config.get_api_key()
    if not api_key:
        raise ValueError("No Gemini API key configured - set gemini.api_key or GEMINI_API_KEY")
    return genai.Client(api_key=api_key)
