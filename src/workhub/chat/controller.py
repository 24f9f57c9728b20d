from __future__ import annotations

import logging

from flask import Flask, Response, json, request, stream_with_context

from ..common.http import current_user_id, json_body, login_required, ok, require_params
from ..container import Container
from .broadcaster import room_topic
from .serializers import message_json, room_json

logger = logging.getLogger(__name__)


def _sse(event: dict) -> str:
    return f"event: {event.get('type', 'message')}\ndata: {json.dumps(event)}\n\n"


def register(app: Flask, container: Container) -> None:
    rooms = container.chat_room_service
    messages = container.message_service

    @app.route("/api/chat_rooms", methods=["GET"], endpoint="chat_rooms_index")
    @login_required
    def chat_rooms_index():
        direct, channels = rooms.list_for_user(current_user_id())
        return ok({"direct_messages": [room_json(v) for v in direct], "channels": [room_json(v) for v in channels]})

    @app.route("/api/chat_rooms", methods=["POST"], endpoint="chat_rooms_create")
    @login_required
    def chat_rooms_create():
        data = json_body()
        actor_id = current_user_id()
        if data.get("is_direct_message"):
            user_ids = data.get("user_ids") or []
            other = data.get("user_id") or next((u for u in user_ids if str(u) != str(actor_id)), None)
            view = rooms.direct_message(actor_id=actor_id, other_user_id=other)
        else:
            view = rooms.create_group(
                actor_id=actor_id,
                name=data.get("name"),
                user_ids=data.get("user_ids") or [],
                organization_id=data.get("organization_id"),
            )
        return ok(room_json(view), status=201)

    @app.route("/api/chat_rooms/direct/<int:user_id>", methods=["POST"], endpoint="chat_rooms_direct")
    @login_required
    def chat_rooms_direct(user_id: int):
        return ok(room_json(rooms.direct_message(actor_id=current_user_id(), other_user_id=user_id)))

    @app.route("/api/chat_rooms/<int:room_id>", methods=["GET"], endpoint="chat_rooms_show")
    @login_required
    def chat_rooms_show(room_id: int):
        return ok(room_json(rooms.get(actor_id=current_user_id(), room_id=room_id)))

    @app.route("/api/chat_rooms/<int:room_id>", methods=["PUT", "PATCH"], endpoint="chat_rooms_update")
    @login_required
    def chat_rooms_update(room_id: int):
        view = rooms.update(actor_id=current_user_id(), room_id=room_id, name=json_body().get("name"))
        return ok(room_json(view))

    @app.route("/api/chat_rooms/<int:room_id>", methods=["DELETE"], endpoint="chat_rooms_delete")
    @login_required
    def chat_rooms_delete(room_id: int):
        rooms.delete(actor_id=current_user_id(), room_id=room_id)
        return ok(None, message="Chat room deleted")

    @app.route("/api/chat_rooms/<int:room_id>/members", methods=["POST"], endpoint="chat_rooms_add_members")
    @login_required
    def chat_rooms_add_members(room_id: int):
        data = json_body()
        user_ids = data.get("user_ids") or ([data["user_id"]] if data.get("user_id") else [])
        if not user_ids:
            require_params(data, "user_ids")
        return ok(room_json(rooms.add_members(actor_id=current_user_id(), room_id=room_id, user_ids=user_ids)))

    @app.route(
        "/api/chat_rooms/<int:room_id>/members/<int:user_id>",
        methods=["DELETE"],
        endpoint="chat_rooms_remove_member",
    )
    @login_required
    def chat_rooms_remove_member(room_id: int, user_id: int):
        return ok(room_json(rooms.remove_member(actor_id=current_user_id(), room_id=room_id, user_id=user_id)))

    # Messages
    @app.route("/api/chat_rooms/<int:room_id>/messages", methods=["GET"], endpoint="messages_index")
    @login_required
    def messages_index(room_id: int):
        page = messages.list_messages(
            actor_id=current_user_id(),
            room_id=room_id,
            page=request.args.get("page"),
            per_page=request.args.get("per_page"),
        )
        return ok([message_json(m) for m in page.items], meta=page.meta())

    @app.route("/api/chat_rooms/<int:room_id>/messages", methods=["POST"], endpoint="messages_create")
    @login_required
    def messages_create(room_id: int):
        data = json_body()
        payload = data["message"] if isinstance(data.get("message"), dict) else data
        message = messages.create(actor_id=current_user_id(), room_id=room_id, content=payload.get("content"))
        return ok(message_json(message), status=201)

    @app.route("/api/messages/<int:message_id>", methods=["PUT", "PATCH"], endpoint="messages_update")
    @login_required
    def messages_update(message_id: int):
        message = messages.update(actor_id=current_user_id(), message_id=message_id, content=json_body().get("content"))
        return ok(message_json(message))

    @app.route("/api/messages/<int:message_id>", methods=["DELETE"], endpoint="messages_delete")
    @login_required
    def messages_delete(message_id: int):
        messages.delete(actor_id=current_user_id(), message_id=message_id)
        return ok(None, message="Message deleted")

    @app.route("/api/chat_rooms/<int:room_id>/messages/read_all", methods=["POST"], endpoint="messages_read_all")
    @login_required
    def messages_read_all(room_id: int):
        count = messages.read_all(actor_id=current_user_id(), room_id=room_id)
        return ok({"count": count})

    @app.route("/api/chat_rooms/<int:room_id>/typing", methods=["POST"], endpoint="chat_rooms_typing")
    @login_required
    def chat_rooms_typing(room_id: int):
        is_typing = json_body().get("is_typing", True)
        messages.typing(actor_id=current_user_id(), room_id=room_id, is_typing=bool(is_typing))
        return ok(None)

    @app.route("/api/chat_rooms/<int:room_id>/stream", methods=["GET"], endpoint="chat_rooms_stream")
    @login_required
    def chat_rooms_stream(room_id: int):
        actor_id = current_user_id()
        rooms.require_member(room_id=room_id, user_id=actor_id)
        keepalive = float(app.config.get("CHAT_KEEPALIVE_SECONDS", 15))

        sub = container.broadcaster.subscribe(room_topic(room_id))
        messages.user_status(actor_id=actor_id, room_id=room_id, status="joined")
        logger.info("User %s subscribed to %s", actor_id, sub.topic)

        def events():
            try:
                yield ": connected\n\n"
                while True:
                    event = sub.get(timeout=keepalive)
                    yield _sse(event) if event is not None else ": keepalive\n\n"
            finally:
                sub.close()
                messages.user_status(actor_id=actor_id, room_id=room_id, status="left")
                logger.info("User %s left %s (dropped=%d)", actor_id, sub.topic, sub.dropped)

        return Response(
            stream_with_context(events()),
            mimetype="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )
