"""Final Draft XML (.fdx) encoding."""

from fdx.encoder import FDXEncoder, encode
from fdx.secure_xml import parse_xml_safe

__all__ = ["FDXEncoder", "encode", "parse_xml_safe"]
