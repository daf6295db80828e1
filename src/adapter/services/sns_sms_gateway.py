"""
SNS implementation of the SMS gateway.
"""

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from src.app.services.sms_gateway import ISmsGateway, SmsDeliveryError

logger = logging.getLogger(__name__)


class SnsSmsGateway(ISmsGateway):
    """Transactional SMS through Amazon SNS"""

    def __init__(
        self,
        region_name: str,
        sender_id: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client: Any = None,
    ):
        self.sender_id = sender_id
        if client is None:
            config = Config(
                region_name=region_name,
                retries={"max_attempts": 1, "mode": "standard"},
                connect_timeout=5,
                read_timeout=10,
            )
            kwargs = {"config": config}
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            client = boto3.client("sns", **kwargs)
        self.client = client

    async def send(self, phone_number: str, message: str) -> str:
        attributes = {
            "AWS.SNS.SMS.SMSType": {"DataType": "String", "StringValue": "Transactional"}
        }
        if self.sender_id:
            attributes["AWS.SNS.SMS.SenderID"] = {
                "DataType": "String",
                "StringValue": self.sender_id,
            }

        try:
            response = await run_in_threadpool(
                self.client.publish,
                PhoneNumber=phone_number,
                Message=message,
                MessageAttributes=attributes,
            )
        except ClientError as e:
            status_code = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            raise SmsDeliveryError(
                e.response.get("Error", {}).get("Message") or str(e), status_code
            ) from e
        except BotoCoreError as e:
            raise SmsDeliveryError(str(e)) from e

        return response.get("MessageId", "")
