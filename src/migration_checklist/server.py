import logging

from flask import Flask, jsonify, request

from .seatable_client import SeaTableStore

logger = logging.getLogger(__name__)


def create_app(store: SeaTableStore) -> Flask:
    """两个资源：/todos 与 /settings，请求体原样透传到存储"""
    app = Flask(__name__)

    @app.get("/todos")
    def get_todos():
        try:
            return jsonify(store.load_todos())
        except Exception:
            logger.exception("读取 todos 失败")
            return jsonify({"error": "Failed to get todos"}), 500

    @app.put("/todos")
    def put_todos():
        try:
            todos = request.get_json(force=True)
            store.save_todos(todos)
            return jsonify(todos)
        except Exception:
            logger.exception("写入 todos 失败")
            return jsonify({"error": "Failed to update todos"}), 500

    @app.get("/settings")
    def get_settings():
        try:
            return jsonify(store.load_settings())
        except Exception:
            logger.exception("读取 settings 失败")
            return jsonify({"error": "Failed to get settings"}), 500

    @app.put("/settings")
    def put_settings():
        try:
            settings = request.get_json(force=True)
            store.save_settings(settings)
            return jsonify(settings)
        except Exception:
            logger.exception("写入 settings 失败")
            return jsonify({"error": "Failed to update settings"}), 500

    return app
