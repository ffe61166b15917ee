"""Tool routes: /api/tools/*."""

from __future__ import annotations

from flask import Blueprint, abort, current_app, jsonify, request

from schemagov.dispatch import Toolkit
from schemagov.tools import REGISTRY, describe_tools

tools_bp = Blueprint("tools", __name__)


@tools_bp.route("/", methods=["GET"])
def list_tools():
    """Names, titles and descriptions of every registered tool."""
    return jsonify(describe_tools())


@tools_bp.route("/<name>", methods=["POST"])
async def call_tool(name: str):
    """Run one tool with the JSON body as its arguments.

    Tool failures are reported in the body with ``is_error`` set, not
    as HTTP errors; only an unknown tool or a malformed body is.
    """
    if name not in REGISTRY:
        abort(404)

    args = request.get_json(silent=True)
    if args is None:
        args = {}
    if not isinstance(args, dict):
        abort(400, description="Request body must be a JSON object")

    config_class = current_app.config["CONFIG_CLASS"]
    transport = current_app.config["SPARQL_TRANSPORT"]
    async with Toolkit.from_config(config_class, transport) as kit:
        response = await kit.call(name, args)
    return jsonify(response.model_dump())
