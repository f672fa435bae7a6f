"""
Domain errors raised by the storefront engine.

main.py registers an exception handler that renders these as JSON
{"detail": ...} responses with the class's status_code.
"""


class StorefrontError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class AuthError(StorefrontError):
    status_code = 400


class SignInRequired(StorefrontError):
    status_code = 401


class EmptyCart(StorefrontError):
    status_code = 400


class CheckoutInProgress(StorefrontError):
    status_code = 409


class PaymentFailed(StorefrontError):
    status_code = 402


class ProductNotFound(StorefrontError):
    status_code = 404


class OrderNotFound(StorefrontError):
    status_code = 404


class InvalidStatusTransition(StorefrontError):
    status_code = 409


class SessionNotFound(StorefrontError):
    status_code = 404
