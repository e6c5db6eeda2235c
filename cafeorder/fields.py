from rest_framework import serializers

from . import validation


def _is_blank(data):
    return data is None or (isinstance(data, str) and not data.strip())


class ValidatedField(serializers.Field):
    """
    Serializer field backed by one of the validation helpers.

    The helper's ``None`` result is reported as an ``invalid`` error carrying
    ``message``. With ``allow_blank`` a blank input maps to ``None`` instead.
    """
    default_error_messages = {
        'invalid': 'Invalid value.',
    }

    def __init__(self, validator, message=None, allow_blank=False, **kwargs):
        self.validator = validator
        self.allow_blank = allow_blank
        super().__init__(**kwargs)
        if message:
            self.error_messages['invalid'] = message

    def to_internal_value(self, data):
        if self.allow_blank and _is_blank(data):
            return None
        value = self.validator(data)
        if value is None:
            self.fail('invalid')
        return value

    def to_representation(self, value):
        return value


class SanitizedCharField(serializers.Field):
    """Free text run through ``sanitize_string``; empty input becomes ``None``."""
    default_error_messages = {
        'invalid': 'Must be a string.',
    }

    def __init__(self, max_length=500, **kwargs):
        self.max_length = max_length
        kwargs.setdefault('allow_null', True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if isinstance(data, (dict, list, bool)):
            self.fail('invalid')
        return validation.sanitize_string(data, self.max_length)

    def to_representation(self, value):
        return value


class SortOrderField(serializers.Field):
    """Clamped integer, never rejected."""

    def __init__(self, **kwargs):
        kwargs.setdefault('allow_null', True)
        super().__init__(**kwargs)

    def validate_empty_values(self, data):
        if data is None:
            return (True, 0)
        return super().validate_empty_values(data)

    def to_internal_value(self, data):
        return validation.validate_sort_order(data)

    def to_representation(self, value):
        return value


def UUIDField(message='Invalid id.', **kwargs):
    return ValidatedField(validation.validate_uuid, message, **kwargs)


def PriceField(**kwargs):
    return ValidatedField(
        validation.validate_price,
        'Price must be a number between 0 and 10,000,000.',
        **kwargs
    )


def QuantityField(**kwargs):
    return ValidatedField(
        validation.validate_quantity,
        'Quantity must be a whole number between 1 and 1000.',
        **kwargs
    )


def TableNumberField(**kwargs):
    return ValidatedField(
        validation.validate_table_number,
        'Table number must be letters, digits or hyphens (max 20 characters).',
        **kwargs
    )


def NameField(**kwargs):
    return ValidatedField(
        validation.validate_name,
        'Name is required (max 200 characters).',
        **kwargs
    )


def ImageUrlField(**kwargs):
    return ValidatedField(
        validation.validate_image_url,
        'Image URL must start with http:// or https://.',
        **kwargs
    )


def OrderStatusField(**kwargs):
    return ValidatedField(
        validation.validate_order_status,
        'Status must be one of: {}.'.format(', '.join(validation.ORDER_STATUSES)),
        **kwargs
    )


def UUIDListField(max_length=50, **kwargs):
    return ValidatedField(
        lambda values: validation.validate_uuid_array(values, max_length),
        'Must be a list of at most {} valid ids.'.format(max_length),
        **kwargs
    )
