from authentication.exceptions import InvalidInput, NotFound
from .validation import validate_uuid


def get_object_by_uuid(queryset, pk, label='Resource'):
    """
    Like ``get_object_or_404`` for UUID keys taken from the URL.

    A malformed id is an input error (400), an unknown one is NotFound (404).
    """
    valid_pk = validate_uuid(pk)
    if not valid_pk:
        raise InvalidInput(f"Invalid {label.lower()} id")

    try:
        return queryset.get(pk=valid_pk)
    except queryset.model.DoesNotExist:
        raise NotFound(f"{label} not found")
