from tooling_kernel.utils.document_numbers import (
    DocumentPrefix,
    format_document_number,
    next_document_number,
    parse_document_number,
)

__all__ = [
    "DocumentPrefix",
    "format_document_number",
    "next_document_number",
    "parse_document_number",
]
