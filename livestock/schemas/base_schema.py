from pydantic import BaseModel, ConfigDict, model_validator


class FormSchema(BaseModel):
    """Base for every form payload: trims strings and drops blank inputs."""
    model_config = ConfigDict(str_strip_whitespace=True, extra='ignore')

    @model_validator(mode='before')
    @classmethod
    def drop_blank_fields(cls, data):
        # an empty form input means "not provided"
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if not (v is None or (isinstance(v, str) and not v.strip()))}
        return data
