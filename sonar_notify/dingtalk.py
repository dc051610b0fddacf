"""DingTalk custom robot client.

Usage:
    bot = DingTalkClient()
    bot.send(message, access_token="xxxx")   # raises DeliveryError on errcode != 0

The robot answers HTTP 200 for most failures and reports them in the body:
``{"errcode": 310000, "errmsg": "keywords not in content"}``.
"""

import logging

import requests

from sonar_notify.errors import DecodeError, DeliveryError, NetworkError, ValidationError
from sonar_notify.render import Message

logger = logging.getLogger(__name__)

DEFAULT_ROBOT_URL = "https://oapi.dingtalk.com/robot/send"


class DingTalkClient:
    """Posts rendered messages to a DingTalk group robot."""

    def __init__(self, url: str = DEFAULT_ROBOT_URL, timeout: float = 10) -> None:
        self.url = url
        self._timeout = timeout

    def send(self, message: Message, access_token: str) -> dict:
        """POST *message* to the robot identified by *access_token*.

        Returns the acknowledgment body on success.

        Raises:
            ValidationError: empty access token
            NetworkError:    timeout or connection failure
            DecodeError:     acknowledgment is not JSON
            DeliveryError:   ``errcode`` absent or not 0
        """
        if not access_token:
            raise ValidationError("missing access token")

        try:
            response = requests.post(
                self.url,
                params={"access_token": access_token},
                json=message.to_payload(),
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting DingTalk"
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise NetworkError(f"Unable to reach DingTalk at '{self.url}'") from exc

        try:
            ack = response.json()
        except ValueError as exc:
            raise DecodeError(
                f"DingTalk returned a non-JSON response (HTTP {response.status_code})"
            ) from exc

        errcode = ack.get("errcode") if isinstance(ack, dict) else None
        # bool is an int subclass; False must not count as success
        if type(errcode) is not int or errcode != 0:
            errmsg = ack.get("errmsg", "") if isinstance(ack, dict) else ""
            raise DeliveryError(errcode, errmsg)

        logger.debug("DingTalk accepted message '%s'", message.title)
        return ack
