"""
Error Taxonomy

Domain errors raised by the managers and converted to the standard
`{success: false, message}` envelope at the API boundary.
"""


class CardManagementError(Exception):
    """Base class for all card management errors"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(CardManagementError):
    """Malformed or semantically invalid request"""
    status_code = 400


class UnauthenticatedError(CardManagementError):
    """Missing, invalid or unresolvable bearer token"""
    status_code = 401


class InvalidCredentialsError(CardManagementError):
    """Login with an unknown user or a wrong password"""
    status_code = 401


class ForbiddenError(CardManagementError):
    """Resource exists but belongs to another user"""
    status_code = 403


class NotFoundError(CardManagementError):
    """Resource does not exist"""
    status_code = 404
