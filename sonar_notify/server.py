"""Flask application receiving SonarQube webhooks.

Configure the SonarQube webhook as:

    http://<host>:9010/dingtalk?access_token=<robot token>&sonar_token=<user token>

Each request is independent: parse → fetch measures → render → send.
"""

import logging
from typing import Mapping

from flask import Flask, request

from sonar_notify.client import SonarClient
from sonar_notify.config import Config
from sonar_notify.dingtalk import DingTalkClient
from sonar_notify.errors import NotifyError
from sonar_notify.measures import fetch_measures
from sonar_notify.render import render_markdown
from sonar_notify.webhook import parse_webhook

logger = logging.getLogger(__name__)

SUCCESS_TEXT = "消息推送成功"
FAILURE_TEXT = "消息推送失败: {reason}"


def relay(query: Mapping[str, str], body: str | bytes, config: Config, bot: DingTalkClient) -> None:
    """Run the whole pipeline for one webhook delivery.

    A failed measures fetch is logged and the message is sent with empty
    metrics. Parsing and delivery errors propagate as NotifyError.
    """
    ctx = parse_webhook(query, body)
    logger.info("Scan finished for project '%s' branch '%s' (%s)",
                ctx.project_key, ctx.branch_name, ctx.branch_type or "BRANCH")

    client = SonarClient(ctx.server_url, token=ctx.sonar_token, timeout=config.timeout)
    try:
        ctx = ctx.with_measures(fetch_measures(client, ctx))
    except NotifyError as exc:
        logger.warning("Fetching measures for '%s' failed, sending without metrics: %s",
                       ctx.project_key, exc)

    message = render_markdown(
        ctx,
        multi_branch=config.multi_branch,
        success_image=config.success_image,
        failure_image=config.failure_image,
    )
    bot.send(message, ctx.access_token)
    logger.info("Notification for '%s' delivered", ctx.project_key)


def create_app(config: Config) -> Flask:
    app = Flask(__name__)
    bot = DingTalkClient(url=config.robot_url, timeout=config.timeout)

    def _text(body: str):
        # The webhook caller only looks at the body; status stays 200
        return body, 200, {"Content-Type": "text/plain; charset=utf-8"}

    @app.route("/health", methods=["GET"])
    def health():
        return {"status": "ok", "service": "sonar-notify"}, 200

    @app.route("/dingtalk", methods=["POST"])
    def dingtalk():
        try:
            relay(request.args, request.get_data(), config, bot)
        except NotifyError as exc:
            logger.error("Webhook from %s not relayed: %s: %s",
                         request.remote_addr, type(exc).__name__, exc)
            return _text(FAILURE_TEXT.format(reason=exc))
        return _text(SUCCESS_TEXT)

    return app
