from formalis.services.validation.input_validator import (
    FormSchema,
    IdList,
    clean_empty_strings,
    format_validation_errors,
    optional_email,
    required_email,
    required_text,
    validate_input,
)

__all__ = [
    "FormSchema",
    "IdList",
    "clean_empty_strings",
    "format_validation_errors",
    "optional_email",
    "required_email",
    "required_text",
    "validate_input",
]
