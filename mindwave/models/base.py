from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    """Request/response body with camelCase JSON keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

def camelize(record: dict) -> dict:
    """Rename the top-level keys of a stored row for the JSON API"""
    return {to_camel(key): value for key, value in record.items()}
