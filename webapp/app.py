from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, current_app, jsonify, request

from aligner.config import PanelConfig
from aligner.output import FixedPathChooser
from aligner.params import parse_encoding
from aligner.service import AlignerPanel

PANEL_KEY = "ALIGNER_PANEL"


def _panel() -> AlignerPanel:
    return current_app.config[PANEL_KEY]


def create_app(panel: Optional[AlignerPanel] = None) -> Flask:
    app = Flask(__name__)
    app.config[PANEL_KEY] = panel if panel is not None else AlignerPanel.from_config(PanelConfig.from_env())

    @app.get("/api/aligner/parameters")
    def api_parameters():
        return jsonify(_panel().describe())

    @app.post("/api/aligner/parameters")
    def api_set_parameter():
        panel = _panel()
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return jsonify({"error": "request body must be a JSON object"}), 400
        role = str(payload.get("role", "")).strip().lower()
        has_encoding = "encoding" in payload

        if not role and not has_encoding:
            return jsonify({"error": "role or encoding is required"}), 400

        try:
            encoding = parse_encoding(payload.get("encoding")) if has_encoding else None
            if role:
                path_text = str(payload.get("path") or "").strip()
                panel.params.set(role, path_text or None)
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        if has_encoding:
            panel.params.set_encoding(encoding)

        return jsonify(panel.describe())

    @app.post("/api/aligner/start")
    def api_start():
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return jsonify({"error": "request body must be a JSON object"}), 400
        chooser = FixedPathChooser(payload.get("output_path"))
        try:
            result = _panel().start(chooser)
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify(result.to_dict())

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    create_app().run(host="127.0.0.1", port=5000, debug=False, threaded=True)
