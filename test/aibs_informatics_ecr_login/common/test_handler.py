import logging
from dataclasses import dataclass
from test.aibs_informatics_ecr_login.base import LambdaHandlerTestCase, LambdaHandlerType
from test.base import BaseTest

from aibs_informatics_core.models.base import SchemaModel, StringField, custom_field

from aibs_informatics_ecr_login.common.base import HandlerMixins
from aibs_informatics_ecr_login.common.handler import LambdaHandler
from aibs_informatics_ecr_login.common.logging import (
    SERVICE_NAME,
    add_handler_to_logger,
    get_service_logger,
)


@dataclass
class EchoRequest(SchemaModel):
    message: str = custom_field(mm_field=StringField())


@dataclass
class EchoResponse(SchemaModel):
    message: str = custom_field(mm_field=StringField())


class EchoHandler(LambdaHandler[EchoRequest, EchoResponse]):
    def handle(self, request: EchoRequest) -> EchoResponse:
        return EchoResponse(message=request.message.upper())


class SilentHandler(LambdaHandler[EchoRequest, EchoResponse]):
    def handle(self, request: EchoRequest) -> None:  # type: ignore[override]
        return None


class EchoHandlerTests(LambdaHandlerTestCase):
    @property
    def handler(self) -> LambdaHandlerType:
        return EchoHandler.get_handler()

    def test__handles__serializes_response(self):
        self.assertHandles(self.handler, {"message": "hi"}, {"message": "HI"})

    def test__handles__no_response(self):
        self.assertHandles(SilentHandler.get_handler(), {"message": "hi"}, None)

    def test__repr__names_request_and_response(self):
        assert "EchoHandler" in repr(EchoHandler())


class HandlerMixinsTests(BaseTest):
    def test__context__raises_when_unset(self):
        with self.assertRaises(ValueError):
            HandlerMixins().context

    def test__service_name__is_class_name(self):
        assert EchoHandler.service_name() == "EchoHandler"


class LoggingTests(BaseTest):
    def test__get_service_logger__defaults_service_name(self):
        assert get_service_logger().service == SERVICE_NAME

    def test__add_handler_to_logger__adds_handler_once(self):
        service_logger = get_service_logger("test-service")
        target = logging.getLogger("test.aibs_informatics_ecr_login.logging")

        add_handler_to_logger(service_logger, target)
        add_handler_to_logger(service_logger, target)

        assert target.handlers.count(service_logger.registered_handler) == 1
        target.removeHandler(service_logger.registered_handler)
