# File: connectvue/plugin.py
"""
protoc-gen-connect-vue - protoc Plugin Entry Point
===================================================

Usage with buf::

    # buf.gen.yaml
    plugins:
      - local: protoc-gen-connect-vue
        out: src/api
        opt: output_root=./gen,base_url=/api

protoc sends a serialised ``CodeGeneratorRequest`` on stdin and expects a
``CodeGeneratorResponse`` on stdout, so all logging goes to stderr.  Any
failure is reported through ``CodeGeneratorResponse.error``; a partial file
set is never returned.
"""

from __future__ import annotations

import logging
import sys
from typing import BinaryIO, Dict, Optional

from google.protobuf.compiler import plugin_pb2
from jinja2 import TemplateError

from connectvue.descriptors import DescriptorLoader
from connectvue.generator import build_config, render_service
from connectvue.models import DescriptorSet, GenerationConfig

logger: logging.Logger = logging.getLogger("connectvue.plugin")

PLUGIN_NAME: str = "protoc-gen-connect-vue"


def parse_parameter(parameter: str) -> Dict[str, str]:
    """
    Parse the protoc parameter string ``key=value,key=value``.

    A bare ``key`` maps to ``"true"``.  Empty chunks are ignored.
    """
    values: Dict[str, str] = {}
    for chunk in parameter.split(","):
        key, sep, value = chunk.partition("=")
        key = key.strip()
        if not key:
            continue
        values[key] = value.strip() if sep else "true"
    return values


def generate_code(request: plugin_pb2.CodeGeneratorRequest) -> plugin_pb2.CodeGeneratorResponse:
    """Run the pipeline for *request* and return a populated response."""
    response = plugin_pb2.CodeGeneratorResponse()
    response.supported_features = plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    try:
        config: GenerationConfig = build_config(parse_parameter(request.parameter))
        descriptors: DescriptorSet = DescriptorLoader(request).load()
        rendered: Dict[str, str] = render_service(descriptors, config)
    except (ValueError, TemplateError, OSError) as exc:
        logger.error("Generation failed: %s", exc)
        response.error = f"{PLUGIN_NAME}: {type(exc).__name__}: {exc}"
        return response

    for name, content in rendered.items():
        out = response.file.add()
        out.name = name
        out.content = content
    logger.info("Generated %d file(s).", len(rendered))
    return response


def main(stdin: Optional[BinaryIO] = None, stdout: Optional[BinaryIO] = None) -> None:
    """Read a request from stdin and write the response to stdout."""
    logging.basicConfig(
        level=logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s │ %(name)s │ %(message)s",
    )
    source = stdin if stdin is not None else sys.stdin.buffer
    sink = stdout if stdout is not None else sys.stdout.buffer

    request = plugin_pb2.CodeGeneratorRequest()
    payload: bytes = source.read()
    if payload:
        request.ParseFromString(payload)

    response = generate_code(request)
    sink.write(response.SerializeToString())
    sink.flush()


if __name__ == "__main__":
    main()
