"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Profile
  3xxx: Market
  4xxx: Vote
  9xxx: System

Every rejection a caller can trigger is an AppError subclass; the FastAPI
exception handler in src/main.py maps it to the ApiResponse envelope.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "An account with this email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid email or password", 401)


class EmailDomainNotAllowedError(AppError):
    def __init__(self, domain: str) -> None:
        super().__init__(1004, f"Only @{domain} emails are allowed", 400)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class UnauthenticatedError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Authentication required", 401)


class EmailUnverifiedError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Please verify your email before voting", 403)


class InvalidVerificationTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1008, "Invalid or expired verification token", 400)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1009, "Admin account required", 403)


class UserNotFoundError(AppError):
    def __init__(self, email: str) -> None:
        super().__init__(1010, f"User not found: {email}", 404)


# --- 2xxx: Profile ---

class ProfileExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(
            2001, "You already have a profile. Each user can only create one profile.", 409
        )


class ProfileNotFoundError(AppError):
    def __init__(self) -> None:
        super().__init__(2002, "Profile not found", 404)


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketNotActiveError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3002, f"Market is not active: {market_id}", 422)


# --- 4xxx: Vote ---

class DuplicateVoteError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(4001, f"You've already voted on market {market_id}", 409)


class SelfVoteForbiddenError(AppError):
    def __init__(self) -> None:
        super().__init__(4002, "You cannot vote on your own profile", 403)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class InvalidInputError(AppError):
    def __init__(self, detail: str = "Invalid request") -> None:
        super().__init__(9003, detail, 400)


class StorageConflictError(AppError):
    def __init__(self, attempts: int) -> None:
        super().__init__(
            9004, f"Concurrent update conflict persisted after {attempts} attempts", 503
        )
