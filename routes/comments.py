import logging

from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import RequestEntityTooLarge

from models import db
from models.comment import Comment
from utils.audit import log_event
from utils.auth_context import login_required

logger = logging.getLogger(__name__)

comments_bp = Blueprint("comments", __name__)


def create_comment(content: str, thread_id, login_id: int):
    if thread_id is not None and not Comment.query.filter_by(id=thread_id).first():
        return None

    comment = Comment(content=content, thread_id=thread_id, login_id=login_id)
    db.session.add(comment)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Comment insert failed for login_id=%s", login_id)
        return None
    return comment


@comments_bp.post("/add+comment")
@login_required(require_fresh_claims=True)
def add_comment():
    max_bytes = current_app.config.get("COMMENT_MAX_BYTES", 891)
    # enforced on the stream too, so chunked bodies are capped
    request.max_content_length = max_bytes
    try:
        data = request.get_json(silent=True)
    except RequestEntityTooLarge:
        return jsonify(error="Comment too long"), 413
    if not isinstance(data, dict):
        return jsonify(error="Comment failed"), 400
    content = data.get("comment")
    thread_id = data.get("thread_id")

    if not isinstance(content, str) or not content.strip():
        return jsonify(error="Comment failed"), 400

    # 0 is how the client says "top level"
    if thread_id in (0, None):
        thread_id = None
    elif not isinstance(thread_id, int) or isinstance(thread_id, bool):
        return jsonify(error="Comment failed"), 400

    login_id = int(g.claims["sub"])
    comment = create_comment(content.strip(), thread_id, login_id)
    if comment is None:
        return jsonify(error="Comment failed"), 400

    log_event("COMMENT_CREATE", login_id=login_id, entity="comment", entity_id=comment.id)
    return jsonify(id=comment.id), 200
