# app/utils/exceptions.py


class ChatBotError(Exception):
    """Base exception for chat endpoint errors"""
    pass


class InvalidPromptError(ChatBotError):
    """The request carried no usable prompt"""
    pass


class UpstreamError(ChatBotError):
    """The model call or the memory store failed"""

    def __init__(self, details: str):
        super().__init__(details)
        self.details = details


class ServiceUnavailableError(ChatBotError):
    """Application state needed by the endpoint is not set up"""
    pass
