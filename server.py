#!/usr/bin/env python3
"""
Local preview server for the built site.

Serves the JSON manifests written by build_content.py under /data/ and
everything else (item assets, pages) from the content tree, so the viewer
can be pointed at http://localhost:8080 exactly as it would be at the
deployed site.

Usage:
    python server.py [--port PORT] [--config PATH]

Then fetch http://localhost:8080/data/blog-posts.json
"""

import argparse
import json
import mimetypes
import sys
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from urllib.parse import unquote, urlparse

from site_config import ConfigError, load_config


DATA_PREFIX = '/data/'


class PreviewServer(HTTPServer):
    def __init__(self, address, output_dir: Path, content_dir: Path, quiet: bool = False):
        super().__init__(address, RequestHandler)
        self.output_dir = Path(output_dir).resolve()
        self.content_dir = Path(content_dir).resolve()
        self.quiet = quiet


def resolve_under(root: Path, rel_path: str) -> Path | None:
    """Resolve rel_path inside root, refusing anything that escapes it."""
    candidate = (root / rel_path.lstrip('/')).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    return candidate


class RequestHandler(BaseHTTPRequestHandler):
    protocol_version = 'HTTP/1.0'

    def send_json(self, data, status: int = 200):
        body = json.dumps(data, ensure_ascii=False).encode('utf-8')
        self.send_response(status)
        self.send_header('Content-Type', 'application/json; charset=utf-8')
        self.send_header('Content-Length', str(len(body)))
        self.send_header('Connection', 'close')
        self.end_headers()
        self.wfile.write(body)
        self.wfile.flush()

    def send_file(self, file_path: Path):
        body = file_path.read_bytes()
        content_type = mimetypes.guess_type(file_path.name)[0] or 'application/octet-stream'
        if content_type.startswith('text/') or content_type == 'application/json':
            content_type += '; charset=utf-8'
        self.send_response(200)
        self.send_header('Content-Type', content_type)
        self.send_header('Content-Length', str(len(body)))
        self.send_header('Connection', 'close')
        self.end_headers()
        self.wfile.write(body)
        self.wfile.flush()

    def send_not_found(self):
        self.send_json({'error': 'Not found'}, status=404)

    def do_GET(self):
        path = unquote(urlparse(self.path).path)

        try:
            if path.startswith(DATA_PREFIX):
                file_path = resolve_under(self.server.output_dir, path[len(DATA_PREFIX):])
            else:
                if path.endswith('/'):
                    path += 'index.html'
                file_path = resolve_under(self.server.content_dir, path)

            if file_path is None or not file_path.is_file():
                self.send_not_found()
                return

            self.send_file(file_path)

        except OSError as e:
            print(f"Error handling request: {e}", flush=True)
            self.send_response(500)
            self.end_headers()

    def log_message(self, format, *args):
        if not self.server.quiet:
            print(f"[{self.command}] {self.path}", flush=True)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description='Preview server for the built site')
    parser.add_argument('--port', type=int, default=8080, help='Port to run server on')
    parser.add_argument('--config', type=Path, default=None, help='Path to site.yaml')
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    for collection in config.collections.values():
        manifest = config.output_dir / collection.manifest
        if not manifest.exists():
            print(f"Warning: Manifest not found at {manifest}")
            print("Run build_content.py first to generate it.")

    server = PreviewServer(('localhost', args.port), config.output_dir, config.content_dir)
    print(f"\n{'='*50}")
    print("  Site preview")
    print(f"{'='*50}")
    print(f"\n  Open in browser: http://localhost:{args.port}")
    print(f"  Manifests:       http://localhost:{args.port}{DATA_PREFIX}")
    print(f"\n  Press Ctrl+C to stop the server")
    print(f"{'='*50}\n")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nServer stopped.")
    finally:
        server.server_close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
