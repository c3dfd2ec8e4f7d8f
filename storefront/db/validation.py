# storefront/db/validation.py
"""
Payload validation for the catalog and cart operations.

Every validator is a pure function ``payload -> (value, errors)``: either the
parsed value and an empty list, or ``None`` and one human readable message per
violated field. Nothing here knows about HTTP status codes.
"""
from typing import Annotated, Any, List, Optional, Tuple

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError
from pydantic_core import PydanticCustomError

# Integer columns are 32-bit on Postgres
INT32_MAX = 2 ** 31 - 1
INT32_MIN = -(2 ** 31)


def _reject_bool(value):
    # lax mode would read true/false as 1/0
    if isinstance(value, bool):
        raise PydanticCustomError("number_type", "Input should be a number")
    return value


Number = BeforeValidator(_reject_bool)
Reference = Annotated[int, Number, Field(gt=0, le=INT32_MAX)]


class ProductIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: Annotated[float, Number, Field(allow_inf_nan=False)]
    category: Reference
    stock: Annotated[int, Number, Field(ge=INT32_MIN, le=INT32_MAX)]
    # may be left out, but not sent as null
    image: str = Field(default=None)
    brand: str = Field(default=None)

    def as_columns(self) -> dict:
        """Column values of the Product row; optional fields are cleared when absent."""
        return {
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "category_id": self.category,
            "stock": self.stock,
            "image": self.image,
            "brand": self.brand,
        }


class CartItemIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    product: Reference
    quantity: Annotated[int, Number, Field(gt=0, le=INT32_MAX)]


class CartItemsIn(BaseModel):
    items: List[CartItemIn]


LABELS = {
    "name": "Name",
    "description": "Description",
    "price": "Price",
    "category": "Category",
    "stock": "Stock",
    "image": "Image",
    "brand": "Brand",
    "product": "Product ID",
    "quantity": "Quantity",
    "items": "Items",
}

MESSAGES = {
    "missing": "{label} is required",
    "string_type": "{label} must be a string",
    "string_too_short": "{label} is not allowed to be empty",
    "float_type": "{label} must be a number",
    "float_parsing": "{label} must be a number",
    "int_type": "{label} must be a number",
    "int_parsing": "{label} must be a number",
    "int_from_float": "{label} must be an integer",
    "greater_than": "{label} must be positive",
    "greater_than_equal": "{label} must be greater than or equal to {ge}",
    "less_than_equal": "{label} must be less than or equal to {le}",
    "number_type": "{label} must be a number",
    "finite_number": "{label} must be a finite number",
    "list_type": "{label} must be a list",
    "model_type": "{label} must be an object",
    "model_attributes_type": "{label} must be an object",
    "extra_forbidden": "{label} is not allowed",
}

# Reference fields report type problems as a bad id
FIELD_MESSAGES = {
    ("items", "missing"): "Items are required",
}
for _ref in ("category", "product"):
    for _kind in ("int_type", "int_parsing", "int_from_float", "number_type", "greater_than", "less_than_equal"):
        FIELD_MESSAGES[(_ref, _kind)] = "{label} must be a valid id"


def _message(error: dict) -> str:
    loc = error["loc"]
    indexes = [part for part in loc if isinstance(part, int)]
    if loc and isinstance(loc[-1], str):
        field = loc[-1]
        label = LABELS.get(field, field)
    else:
        # the whole payload, or a whole element of a list
        field = None
        label = "Payload" if not indexes else "Value"
    template = FIELD_MESSAGES.get((field, error["type"])) or MESSAGES.get(error["type"])
    text = template.format(label=label, **(error.get("ctx") or {})) if template else f"{label}: {error['msg']}"
    if indexes:
        return f"Item {indexes[0] + 1}: {text}"
    return text


def format_errors(exc: ValidationError) -> List[str]:
    messages = []
    for error in exc.errors():
        text = _message(error)
        if text not in messages:
            messages.append(text)
    return messages


def _validate(model, payload: Any):
    try:
        return model.model_validate(payload), []
    except ValidationError as exc:
        return None, format_errors(exc)


def validate_product(payload: Any) -> Tuple[Optional[ProductIn], List[str]]:
    return _validate(ProductIn, payload)


def validate_cart_item(payload: Any) -> Tuple[Optional[CartItemIn], List[str]]:
    return _validate(CartItemIn, payload)


def validate_cart_items(payload: Any) -> Tuple[Optional[List[CartItemIn]], List[str]]:
    """Validate a bulk ``{"items": [...]}`` payload; a product may appear only once."""
    value, errors = _validate(CartItemsIn, payload)
    if errors:
        return None, errors

    seen = set()
    for index, item in enumerate(value.items, start=1):
        if item.product in seen:
            errors.append(f"Item {index}: Duplicate product {item.product}")
        seen.add(item.product)
    if errors:
        return None, errors
    return value.items, []
