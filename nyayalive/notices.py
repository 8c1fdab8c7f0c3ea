"""User-facing system messages shown in the conversation log."""

ERROR_OCCURRED = "Sorry, an error occurred. Please try again."
MIC_ACCESS_DENIED = "Microphone access was denied. Please allow microphone access to use voice input."
CONNECTION_ERROR = ERROR_OCCURRED + " (Connection Error)"
NETWORK_ERROR = ERROR_OCCURRED + " (Network Error)"
AUDIO_OUTPUT_ERROR = ERROR_OCCURRED + " (Audio Output Error)"
NO_RESPONSE = "No response was received from the assistant. Please try speaking again."
MODERATION_BLOCKED = "Your message was blocked because it may contain inappropriate content."
