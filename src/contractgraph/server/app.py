"""contractgraph.server.app - Flask app factory and REST API routes.

This is a THIN REST wrapper: every route delegates to ContractService.
Error mapping:

- ContractSourceError        -> 500 (nothing to load)
- ContractValidationError    -> 400 with the validation result
- failed apply               -> 500 with the apply message
- UnknownModuleError         -> 404
- EmbeddingNotReadyError     -> 503
- InvalidSearchError         -> 400 (bad limit or nothing to search for)

Anything else raised by the graph store propagates to Flask unchanged.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from contractgraph import __version__
from contractgraph.errors import (
    ContractSourceError,
    ContractValidationError,
    EmbeddingNotReadyError,
    InvalidSearchError,
    UnknownModuleError,
)
from contractgraph.service import ContractService

logger = logging.getLogger(__name__)


def create_app(service: ContractService, config: Optional[dict[str, Any]] = None) -> Flask:
    """Create the Flask application with REST API routes.

    Args:
        service: ContractService bound to an open graph store.
        config: contractgraph configuration dict.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)
    app.config["CONTRACTGRAPH"] = config or {}
    app.extensions["contractgraph"] = service

    CORS(app)

    # ─────────────────────────────────────────────────────────────────
    # Error handlers
    # ─────────────────────────────────────────────────────────────────

    @app.errorhandler(ContractSourceError)
    def _source_error(error: ContractSourceError):
        logger.error("%s", error)
        return jsonify({"message": str(error)}), 500

    @app.errorhandler(ContractValidationError)
    def _validation_error(error: ContractValidationError):
        return jsonify({"message": str(error), "validation": error.validation.to_dict()}), 400

    @app.errorhandler(UnknownModuleError)
    def _not_found(error: UnknownModuleError):
        return jsonify({"message": str(error)}), 404

    @app.errorhandler(EmbeddingNotReadyError)
    def _not_ready(error: EmbeddingNotReadyError):
        return jsonify({"message": str(error)}), 503

    @app.errorhandler(InvalidSearchError)
    def _bad_request(error: InvalidSearchError):
        return jsonify({"message": str(error)}), 400

    # ─────────────────────────────────────────────────────────────────
    # Service endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/health")
    def health():
        """GET /health - Liveness and embedding readiness."""
        status = "unavailable"
        if service.embedder is not None:
            status = service.embedder.status().value
        return jsonify(
            {
                "status": "ok",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "service": "contractgraph",
                "version": __version__,
                "embedding": status,
            }
        )

    @app.route("/graph/verify")
    def graph_verify():
        """GET /graph/verify - Check the graph database answers queries."""
        return jsonify(service.verify_connection())

    # ─────────────────────────────────────────────────────────────────
    # Contract endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/contracts")
    def contracts_list():
        """GET /contracts - Every parseable contract file with its content."""
        return jsonify([f.to_dict() for f in service.get_all_contracts()])

    @app.route("/contracts/validate")
    def contracts_validate():
        """GET /contracts/validate - Validation results for all files."""
        return jsonify(service.validate().to_dict())

    @app.route("/contracts/check-if-contract-modified")
    def contracts_check_modified():
        """GET /contracts/check-if-contract-modified - Changes since last apply."""
        return jsonify(service.check_modified().to_dict())

    @app.route("/contracts/apply", methods=["POST"])
    def contracts_apply():
        """POST /contracts/apply - Validate, then rebuild the graph."""
        result = service.apply()
        if not result.success:
            return (
                jsonify(
                    {
                        "message": "Failed to apply contracts to graph database",
                        "details": result.message,
                    }
                ),
                500,
            )
        return jsonify(result.to_dict())

    @app.route("/contracts/search")
    def contracts_search():
        """GET /contracts/search - Semantic or filter-only module search.

        Query parameters:
            query: Free text compared against module descriptions
            type: Exact module type
            category: Exact module category
            limit: Max results, 1-100
        """
        raw_limit = request.args.get("limit")
        try:
            limit = int(raw_limit) if raw_limit is not None else None
        except ValueError:
            return jsonify({"message": f"limit must be an integer, got {raw_limit!r}"}), 400

        result = service.search(
            query=request.args.get("query"),
            module_type=request.args.get("type") or None,
            category=request.args.get("category") or None,
            limit=limit,
        )
        return jsonify(result.to_dict())

    @app.route("/contracts/categories")
    def contracts_categories():
        """GET /contracts/categories - Distinct module categories in the graph."""
        return jsonify({"categories": service.categories()})

    @app.route("/contracts/types")
    def contracts_types():
        """GET /contracts/types - Distinct module types in the graph."""
        types = service.types()
        return jsonify({"types": types, "count": len(types)})

    @app.route("/contracts/<module_id>")
    def contracts_detail(module_id: str):
        """GET /contracts/<module_id> - Stored module with its parts."""
        return jsonify(service.detail(module_id).to_dict())

    @app.route("/contracts/<module_id>/relations")
    def contracts_relations(module_id: str):
        """GET /contracts/<module_id>/relations - Incoming and outgoing dependencies."""
        return jsonify(service.relations(module_id).to_dict())

    return app
