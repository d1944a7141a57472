from aleve_relay.services.ai_service import (
    FALLBACK_REPLY,
    GREETING_REPLY,
    build_user_content,
    compose_messages,
    finalize_reply,
)
from aleve_relay.services.message_parser import parse_incoming_message
from aleve_relay.services.pipeline import ImagePolicy, ReplyPipeline, Route, build_pipeline, route_message
