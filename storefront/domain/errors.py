"""Bledy domeny sklepu.

Kazdy blad to oczekiwany wynik zwracany wywolujacemu, poza ``CheckoutFault``
(awaria systemu: baza albo store lockow). Serwisy je rzucaja,
``storefront.main`` mapuje je na odpowiedzi HTTP.
"""


class StorefrontError(Exception):
    """Bazowy wyjatek dla wszystkich bledow sklepu."""

    def __init__(self, message: str, **context):
        self.context = context
        super().__init__(message)


class ValidationFailed(StorefrontError):
    """Brakujace albo niepoprawne dane wejsciowe."""

    def __init__(self, message: str, errors: list | None = None):
        context = {"errors": errors} if errors else {}
        super().__init__(message, **context)


class InvalidShippingService(ValidationFailed):
    """Kod kuriera spoza tabeli wysylek."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Unknown shipping service: {code}")


class InvalidPaymentMethod(ValidationFailed):
    """Metoda platnosci spoza obslugiwanych."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Unknown payment method: {code}")


class InsufficientStock(StorefrontError):
    """Zadana ilosc przekracza aktualny stock produktu."""

    def __init__(self, product_id: int, requested: int, available: int, name: str | None = None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        label = f"'{name}' ({product_id})" if name else str(product_id)
        super().__init__(
            f"Insufficient stock for product {label}: requested {requested}, available {available}",
            product_id=product_id,
            requested=requested,
            available=available,
        )


class EmptyCart(StorefrontError):
    """Checkout pustego koszyka."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("Cart is empty")


class Forbidden(StorefrontError):
    """Zasob nalezy do innego usera."""

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"Access to {resource} denied")


class NotFound(StorefrontError):
    """Zasob nie istnieje."""

    def __init__(self, resource: str, resource_id: int):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource.capitalize()} not found: {resource_id}")


class CheckoutInProgress(StorefrontError):
    """Ten sam user ma juz checkout w toku."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("Another checkout for this user is in progress")


class CheckoutFault(StorefrontError):
    """Checkout padl z powodu systemowego, nic nie zostalo zapisane."""

    def __init__(self, message: str = "Checkout failed, no changes were applied"):
        super().__init__(message)


class CartConflict(StorefrontError):
    """Linia koszyka nie dala sie scalic mimo ponowien (konflikt na UNIQUE)."""

    def __init__(self, user_id: int, product_id: int):
        self.user_id = user_id
        self.product_id = product_id
        super().__init__(
            "Cart was modified concurrently, please try again",
            product_id=product_id,
        )
