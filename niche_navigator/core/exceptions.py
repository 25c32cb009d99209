"""Custom exceptions for the niche video discovery toolkit"""


class NicheNavigatorError(Exception):
    """Base exception for the niche navigator"""
    pass


class YouTubeAPIError(NicheNavigatorError):
    """Exception raised for YouTube Data API errors"""
    pass


class QuotaExceededError(YouTubeAPIError):
    """Exception raised when YouTube API quota is exceeded"""
    pass


class SuggestionError(NicheNavigatorError):
    """Exception raised when the autocomplete endpoint misbehaves"""
    pass


class ValidationError(NicheNavigatorError):
    """Exception raised for invalid user input"""
    pass


class ConfigurationError(NicheNavigatorError):
    """Exception raised for configuration errors"""
    pass
