"""HTTP API over the promotion service."""

from __future__ import annotations

import argparse
import json
from collections.abc import Sequence

from flask import Flask, Response, jsonify, request

from promohub.config import DEFAULT_CONFIG_FILE, load_config
from promohub.exceptions import NotFoundError, PromotionIDNotFoundError
from promohub.models import Promotion
from promohub.repository import PromotionRepository
from promohub.service import PromotionService


def _error(status: int, message: str) -> tuple[Response, int]:
    return jsonify(message=message), status


def _bind(promo: Promotion) -> Promotion:
    """Overlay the request's JSON body on ``promo``; raises ValueError on bad input."""
    body = request.get_data()
    if not body:
        return promo
    if request.mimetype != "application/json":
        raise ValueError(f"unsupported media type {request.mimetype!r}")
    return promo.merged(json.loads(body))


def create_app(service: PromotionService) -> Flask:
    """Build the application serving the promotion routes."""
    app = Flask(__name__)

    @app.get("/")
    def hello_server():
        return Response("Hello, World!", status=200, mimetype="text/plain")

    @app.get("/promotions")
    def get_all_promotions():
        try:
            promotions = service.get_all_promotions()
        except Exception as exc:
            return _error(500, f"Failed to retrieve promotions: {exc}")
        return jsonify([promo.to_dict() for promo in promotions]), 200

    @app.get("/getpromotion/<promotion_id>")
    def get_promotion(promotion_id: str):
        try:
            promo = service.get_promotion_by_promotion_id(promotion_id)
        except PromotionIDNotFoundError as exc:
            return _error(404, str(exc))
        except Exception:
            return _error(500, "Failed to get promotion")
        return jsonify(promo.to_dict()), 200

    @app.post("/createpromotion")
    def create_promotion():
        try:
            promo = _bind(Promotion())
        except ValueError:
            return _error(400, "Invalid promotion data")
        try:
            created = service.create_promotion(promo)
        except Exception:
            return _error(500, "Failed to create promotion")
        return jsonify(created.to_dict()), 201

    @app.put("/updatepromotion/<promotion_id>")
    def update_promotion(promotion_id: str):
        try:
            promo = service.get_promotion_by_promotion_id(promotion_id)
        except PromotionIDNotFoundError as exc:
            return _error(404, str(exc))
        except Exception:
            return _error(500, "Failed to get promotion")
        try:
            promo = _bind(promo)
        except ValueError:
            return _error(400, "Invalid promotion data")
        try:
            updated = service.update_promotion_by_promotion_id(promo)
        except Exception:
            return _error(500, "Failed to update promotion")
        return jsonify(updated.to_dict()), 200

    @app.delete("/deletepromotion/<promotion_id>")
    def delete_promotion(promotion_id: str):
        try:
            service.delete_promotion_by_promotion_id(promotion_id)
        except NotFoundError as exc:
            return _error(404, str(exc))
        except Exception:
            return _error(500, "Failed to delete promotion")
        return Response(status=204)

    return app


def main(argv: Sequence[str] | None = None) -> int:
    """Load the settings file and serve the promotion API."""
    parser = argparse.ArgumentParser(prog="promohub", description="Serve the promotion API.")
    parser.add_argument("--config", default=DEFAULT_CONFIG_FILE, help="YAML settings file")
    parser.add_argument("--database", default="promotions.db", help="SQLite database file")
    parser.add_argument("--host", default="0.0.0.0", help="address to listen on")
    parser.add_argument("--port", type=int, default=8080, help="port to listen on")
    args = parser.parse_args(argv)

    load_config(args.config)
    with PromotionRepository(args.database) as repository:
        app = create_app(PromotionService(repository))
        app.run(host=args.host, port=args.port, threaded=False)
    return 0