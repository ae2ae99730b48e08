"""
Screen service exceptions

Defines the failure taxonomy of screen dispatch and maps every failure to
the HTTP status it is reported with at the request boundary.
"""

import re
from datetime import datetime
from typing import Dict, Any, Optional


class ScreenException(Exception):
    """Base class for screen dispatch failures"""

    status = 500

    def __init__(self, message: str, error_code: str = "SCREEN_ERROR",
                 component: str = "unknown", details: Optional[Dict[str, Any]] = None,
                 status: Optional[int] = None):
        """Initialise the exception

        Args:
            message: error message
            error_code: machine readable error code
            component: component that failed
            details: extra diagnostic details
            status: HTTP status override
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.component = component
        self.details = details or {}
        if status is not None:
            self.status = status
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a serialisable dict"""
        return {
            'error_code': self.error_code,
            'message': self.message,
            'component': self.component,
            'details': self.details,
            'timestamp': self.timestamp.isoformat()
        }


class NotAuthorizedException(ScreenException):
    """The access gate rejected the current principal"""

    status = 403

    def __init__(self, screen: str, permission: Optional[list] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.screen = screen
        self.permission = list(permission or [])
        error_details = details or {}
        error_details.update({
            'screen': screen,
            'permission': self.permission
        })
        super().__init__(
            f"Access to screen {screen} is not authorized",
            "NOT_AUTHORIZED",
            "AccessGate",
            error_details
        )


class ActionNotFoundException(ScreenException):
    """The requested action method does not exist on the screen"""

    status = 404

    def __init__(self, screen: str, method: Optional[str],
                 details: Optional[Dict[str, Any]] = None):
        self.screen = screen
        self.method = method
        error_details = details or {}
        error_details.update({
            'screen': screen,
            'method': method
        })
        super().__init__(
            f"Method: {method} not found on screen {screen}",
            "ACTION_NOT_FOUND",
            "Dispatcher",
            error_details
        )


class SlugNotFoundException(ScreenException):
    """No layout node of the screen carries the requested slug"""

    status = 404

    def __init__(self, screen: str, slug: str,
                 details: Optional[Dict[str, Any]] = None):
        self.screen = screen
        self.slug = slug
        error_details = details or {}
        error_details.update({
            'screen': screen,
            'slug': slug
        })
        super().__init__(
            f"Async template: {slug} not found on screen {screen}",
            "SLUG_NOT_FOUND",
            "PartialRenderer",
            error_details
        )


class BindingFailureException(ScreenException):
    """A declared parameter type could not be constructed"""

    status = 500

    def __init__(self, type_name: str, message: str, parameter: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.type_name = type_name
        self.parameter = parameter
        error_details = details or {}
        error_details.update({
            'type': type_name,
            'parameter': parameter
        })
        super().__init__(
            f"Unable to resolve {type_name}: {message}",
            "BINDING_FAILURE",
            "ParameterBinder",
            error_details
        )


class ConfigurationException(ScreenException):
    """Configuration error"""

    def __init__(self, config_key: str, message: str,
                 details: Optional[Dict[str, Any]] = None):
        self.config_key = config_key
        error_details = details or {}
        error_details.update({'config_key': config_key})
        super().__init__(
            f"Configuration error for {config_key}: {message}",
            "CONFIGURATION_ERROR",
            "ConfigManager",
            error_details
        )


def handle_exception(exception: Exception, component: str = "unknown",
                     context: Optional[Dict[str, Any]] = None,
                     mask_sensitive: bool = True) -> ScreenException:
    """Normalise any exception into a ScreenException

    Args:
        exception: original exception
        component: component that failed
        context: extra context
        mask_sensitive: whether secrets are masked

    Returns:
        ScreenException: normalised exception
    """
    if isinstance(exception, ScreenException):
        return exception

    details = context or {}

    if mask_sensitive:
        message = _mask_sensitive_info(str(exception))
        details = _mask_sensitive_details(details)
    else:
        message = str(exception)

    details.update({
        'original_exception_type': type(exception).__name__,
        'original_exception_message': message
    })

    return ScreenException(
        message=message,
        error_code="WRAPPED_EXCEPTION",
        component=component,
        details=details
    )


def _mask_sensitive_info(message: str) -> str:
    """Mask secrets in a message"""
    patterns = [
        (r'password["\s]*[:=]["\s]*[^"\s]+', 'password=***'),
        (r'token["\s]*[:=]["\s]*[^"\s]+', 'token=***'),
        (r'key["\s]*[:=]["\s]*[^"\s]+', 'key=***'),
        (r'secret["\s]*[:=]["\s]*[^"\s]+', 'secret=***'),
    ]

    masked_message = message
    for pattern, replacement in patterns:
        masked_message = re.sub(pattern, replacement, masked_message, flags=re.IGNORECASE)

    return masked_message


def _mask_sensitive_details(details: Dict[str, Any]) -> Dict[str, Any]:
    """Mask secrets in a details dict"""
    sensitive_keys = {'password', 'token', 'key', 'secret', 'auth', 'credential'}

    masked_details = {}
    for key, value in details.items():
        if any(sensitive_key in key.lower() for sensitive_key in sensitive_keys):
            masked_details[key] = '***'
        else:
            masked_details[key] = value

    return masked_details


def create_error_response(exception: ScreenException) -> Dict[str, Any]:
    """Build the standard error body

    Args:
        exception: screen exception

    Returns:
        Dict[str, Any]: response body
    """
    return {
        'success': False,
        'error': exception.message,
        'error_code': exception.error_code,
        'details': exception.details,
        'timestamp': datetime.utcnow().isoformat() + 'Z'
    }
