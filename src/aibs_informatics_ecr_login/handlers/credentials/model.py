from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import marshmallow as mm
from aibs_informatics_core.models.base import ListField, SchemaModel, StringField, custom_field

from aibs_informatics_ecr_login.models import ECRCredentials


@dataclass
class GetECRCredentialsRequest(SchemaModel):
    """Request for the login credentials of a single registry.

    Exactly one of `server_url` or `registry_id` must be given.

    Attributes:
        server_url: Registry server URL (e.g. `123456789012.dkr.ecr.us-west-2.amazonaws.com`).
        registry_id: Registry (account) ID.
        region: Region to call ECR in when only a registry ID is given.
    """

    server_url: Optional[str] = custom_field(default=None, mm_field=StringField())
    registry_id: Optional[str] = custom_field(default=None, mm_field=StringField())
    region: Optional[str] = custom_field(default=None, mm_field=StringField())

    @classmethod
    @mm.pre_load
    def _validate_registry_fields(cls, data: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        if bool(data.get("server_url")) == bool(data.get("registry_id")):
            raise mm.ValidationError("Exactly one of server_url or registry_id must be provided")
        return data


@dataclass
class GetECRCredentialsResponse(SchemaModel):
    credentials: ECRCredentials = custom_field(mm_field=ECRCredentials.as_mm_field())


@dataclass
class ListECRCredentialsRequest(SchemaModel):
    region: Optional[str] = custom_field(default=None, mm_field=StringField())


@dataclass
class ListECRCredentialsResponse(SchemaModel):
    credentials: List[ECRCredentials] = custom_field(
        default_factory=list, mm_field=ListField(ECRCredentials.as_mm_field())
    )
