"""
Dictionary Lookup Service — a REST API over the symbol trie.

Exposes a `Dictionary` (words stored as `Char` sequences mapping to part
of speech and meaning) as a JSON API with endpoints for exact lookup,
prefix completion, part-of-speech listing, insertion and deletion.
Built with Flask.  Configured through environment variables.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass

from flask import Flask, jsonify, request

from dictionary import Dictionary, WordEntry
from seqtrie import Traversal, TrieError

logger = logging.getLogger("trie-service")

# Seed entries so the service is useful out-of-the-box
_SEED_ENTRIES = [
    WordEntry("walk", "verb", "move at a regular pace by lifting and setting down each foot"),
    WordEntry("walker", "noun", "a person who walks"),
    WordEntry("sky", "noun", "the region of the atmosphere seen from the earth"),
    WordEntry("skate", "verb", "glide on ice or wheels"),
    WordEntry("lie", "verb", "be in a horizontal position"),
    WordEntry("light", "noun", "the natural agent that makes things visible"),
    WordEntry("quick", "adjective", "moving fast"),
    WordEntry("quickly", "adverb", "at a fast speed"),
    WordEntry("tree", "noun", "a woody perennial plant"),
    WordEntry("trie", "noun", "a tree of symbols keyed by prefix"),
]


@dataclass
class Settings:
    """Service configuration, read from the environment by `from_env`."""

    port: int = 8080
    debug: bool = False
    dictionary_path: str | None = None
    traversal: Traversal = Traversal.INCREMENTAL
    overwrite_allowed: bool = True

    @classmethod
    def from_env(cls, environ=None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            port=int(env.get("PORT", 8080)),
            debug=env.get("FLASK_DEBUG", "0") == "1",
            dictionary_path=env.get("DICTIONARY_PATH") or None,
            traversal=Traversal(env.get("TRIE_TRAVERSAL", Traversal.INCREMENTAL.value).lower()),
            overwrite_allowed=env.get("TRIE_OVERWRITE", "1") != "0",
        )


def build_dictionary(settings: Settings) -> Dictionary:
    dictionary = Dictionary(
        traversal=settings.traversal,
        overwrite_allowed=settings.overwrite_allowed,
    )
    if settings.dictionary_path:
        dictionary.load(settings.dictionary_path)
    else:
        dictionary.add_all(_SEED_ENTRIES)
        logger.info("Seeded dictionary with %d entries", len(_SEED_ENTRIES))
    return dictionary


def create_app(dictionary: Dictionary | None = None, settings: Settings | None = None) -> Flask:
    settings = settings or Settings.from_env()
    if dictionary is None:
        dictionary = build_dictionary(settings)

    app = Flask(__name__)
    # The trie is not thread-safe; every request holds this lock.
    lock = threading.Lock()
    start_time = time.time()

    def query_word():
        return request.args.get("q", "").strip().lower()

    def text_field(body, name):
        value = body.get(name)
        return value.strip() if isinstance(value, str) else ""

    @app.errorhandler(TrieError)
    def invalid_key(exc):
        return jsonify({"error": str(exc)}), 400

    # ── Health & Info ─────────────────────────────────────────────────────

    @app.route("/")
    def index():
        """Landing page with API documentation."""
        return jsonify({
            "service": "Dictionary Lookup Service",
            "version": "1.0.0",
            "description": "REST API for word lookup powered by a symbol Trie",
            "endpoints": {
                "GET  /":                "This help page",
                "GET  /health":          "Health check",
                "GET  /stats":           "Trie statistics",
                "GET  /search?q=<word>": "Exact word lookup",
                "GET  /prefix?q=<pfx>":  "Autocomplete — all words starting with prefix",
                "GET  /pos/<pos>":       "All entries with a part of speech",
                "POST /insert":          "Insert {\"word\": ..., \"pos\": ..., \"meaning\": ...}",
                "DELETE /delete?q=<word>": "Delete a word",
            },
        })

    @app.route("/health")
    def health():
        """Liveness / readiness probe."""
        with lock:
            size = len(dictionary)
        return jsonify({
            "status": "healthy",
            "uptime_seconds": round(time.time() - start_time, 2),
            "trie_size": size,
        })

    @app.route("/stats")
    def stats():
        """Trie statistics."""
        with lock:
            size = len(dictionary)
            trie = dictionary.trie
            return jsonify({
                "total_keys": size,
                "traversal": trie.traversal.value,
                "overwrite_allowed": trie.overwrite_allowed,
                "uptime_seconds": round(time.time() - start_time, 2),
            })

    # ── Core API ──────────────────────────────────────────────────────────

    @app.route("/search")
    def search():
        """Exact word lookup."""
        q = query_word()
        if not q:
            return jsonify({"error": "Missing query parameter 'q'"}), 400
        with lock:
            entry = dictionary.lookup(q)
        return jsonify({
            "word": q,
            "found": entry is not None,
            "entry": entry.to_dict() if entry is not None else None,
        })

    @app.route("/prefix")
    def prefix():
        """Return all words sharing a given prefix (autocomplete)."""
        q = query_word()
        limit = request.args.get("limit", "25", type=str)
        try:
            limit = int(limit)
        except ValueError:
            limit = 25

        if not q:
            return jsonify({"error": "Missing query parameter 'q'"}), 400

        with lock:
            matches = dictionary.complete(q, limit=max(limit, 0))
        return jsonify({
            "prefix": q,
            "count": len(matches),
            "matches": matches,
        })

    @app.route("/pos/<pos>")
    def by_pos(pos):
        """Return every entry with the given part of speech."""
        with lock:
            entries = dictionary.entries_by_pos(pos)
        return jsonify({
            "pos": pos.lower(),
            "count": len(entries),
            "entries": [e.to_dict() for e in entries],
        })

    @app.route("/insert", methods=["POST"])
    def insert():
        """Insert a word and its metadata."""
        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400
        word = body.get("word", "")
        if not isinstance(word, str):
            return jsonify({"error": "'word' must be a string"}), 400
        word = word.strip().lower()
        pos = text_field(body, "pos")
        meaning = text_field(body, "meaning")

        if not word:
            return jsonify({"error": "Missing 'word' in request body"}), 400
        if len(word) > 256:
            return jsonify({"error": "Word too long (max 256 chars)"}), 400

        entry = WordEntry(word, pos, meaning)
        with lock:
            existed = word in dictionary
            dictionary.add(entry)
            stored = dictionary.lookup(word)
            size = len(dictionary)
        logger.info("Inserted word=%s", word)
        return jsonify({
            "inserted": word,
            "entry": stored.to_dict(),
            "created": not existed,
            "trie_size": size,
        }), 201

    @app.route("/delete", methods=["DELETE"])
    def delete():
        """Delete a word."""
        q = query_word()
        if not q:
            return jsonify({"error": "Missing query parameter 'q'"}), 400

        with lock:
            removed = dictionary.remove(q)
            size = len(dictionary)
        deleted = removed is not None
        status = 200 if deleted else 404
        return jsonify({"word": q, "deleted": deleted, "trie_size": size}), status

    return app


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    settings = Settings.from_env()
    app = create_app(settings=settings)
    logger.info("Starting Dictionary Lookup Service on port %d", settings.port)
    app.run(host="0.0.0.0", port=settings.port, debug=settings.debug)


if __name__ == "__main__":
    main()
