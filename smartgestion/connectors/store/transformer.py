"""Smart Gestion — Store Rows → Typed Records Transformer.

Parses raw JSON rows into the record type registered for their view.
Malformed rows are skipped so one bad row never sinks an analytics run.
"""

from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from smartgestion.core.logging import get_logger

logger = get_logger("store.transformer")

ModelT = TypeVar("ModelT", bound=BaseModel)


def transform_rows(
    rows: List[Dict[str, Any]],
    model: Type[ModelT],
    view: str = "",
) -> List[ModelT]:
    """Validate every row against `model`, dropping the ones that fail."""
    records: List[ModelT] = []
    skipped = 0

    for row in rows:
        try:
            records.append(model.model_validate(row))
        except ValidationError as e:
            skipped += 1
            logger.warning(
                f"Skipping malformed {view or model.__name__} row: {e.error_count()} error(s)",
                extra={"view": view},
            )

    if skipped:
        logger.info(
            f"Transformed {len(records)} {view} rows ({skipped} skipped)",
            extra={"view": view, "count": len(records)},
        )
    return records
