# backend/services/errors.py
# Domain errors raised by the service layer. Routes translate them into
# HTTPException; main.py maps anything left over to its status_code.


class DomainError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(DomainError):
    status_code = 404


class OrderNotFound(NotFound):
    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class ProductNotFound(NotFound):
    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class CategoryNotFound(NotFound):
    def __init__(self, category_id: int):
        super().__init__(f"Category {category_id} not found")


class BrandNotFound(NotFound):
    def __init__(self, brand_id: int):
        super().__init__(f"Brand {brand_id} not found")


class UserNotFound(NotFound):
    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")


class ValidationFailed(DomainError):
    status_code = 400


class InvalidCredentials(DomainError):
    status_code = 400

    def __init__(self):
        super().__init__("Invalid username or password")


class Conflict(DomainError):
    status_code = 409


class InsufficientStock(Conflict):
    def __init__(self, product_id: int, requested: int):
        super().__init__(f"Insufficient stock for product {product_id} (requested {requested})")
        self.product_id = product_id
        self.requested = requested


class InvalidTransition(Conflict):
    def __init__(self, from_status: str, to_status: str):
        super().__init__(f"Cannot change order status from '{from_status}' to '{to_status}'")
        self.from_status = from_status
        self.to_status = to_status


class DuplicateUsername(Conflict):
    def __init__(self, username: str):
        super().__init__(f"Username '{username}' already exists")
