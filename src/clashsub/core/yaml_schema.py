"""YAML loader and dumper for daemon configuration documents.

PyYAML resolves plain scalars with the YAML 1.1 rules, which turn ``0123``
into an octal integer, ``off``/``yes`` into booleans and ``1:30`` into a
base-60 number. Writing such a document back changes values nobody touched.
``ConfigLoader`` and ``ConfigDumper`` resolve only the unambiguous YAML 1.2
core forms (``null``, ``true``/``false``, decimal integers and floats); every
other plain scalar stays a string and is written back unquoted.
"""
from __future__ import annotations

import re

import yaml

_YAML11_TAGS = {
    "tag:yaml.org,2002:null",
    "tag:yaml.org,2002:bool",
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:float",
    "tag:yaml.org,2002:timestamp",
}

_CORE_RESOLVERS = (
    ("tag:yaml.org,2002:null", re.compile(r"^(?:~|null|Null|NULL|)$"), ["~", "n", "N", ""]),
    (
        "tag:yaml.org,2002:bool",
        re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
        list("tTfF"),
    ),
    ("tag:yaml.org,2002:int", re.compile(r"^[-+]?(?:0|[1-9][0-9]*)$"), list("-+0123456789")),
    (
        "tag:yaml.org,2002:float",
        re.compile(
            r"^(?:[-+]?(?:\.[0-9]+|[0-9]+\.[0-9]*)(?:[eE][-+]?[0-9]+)?"
            r"|[-+]?[0-9]+[eE][-+]?[0-9]+"
            r"|[-+]?\.(?:inf|Inf|INF)"
            r"|\.(?:nan|NaN|NAN))$"
        ),
        list("-+0123456789."),
    ),
)


def _use_core_schema(cls):
    cls.yaml_implicit_resolvers = {
        first: [(tag, regexp) for tag, regexp in resolvers if tag not in _YAML11_TAGS]
        for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
    }
    for tag, regexp, first in _CORE_RESOLVERS:
        cls.add_implicit_resolver(tag, regexp, first)
    return cls


@_use_core_schema
class ConfigLoader(yaml.SafeLoader):
    pass


@_use_core_schema
class ConfigDumper(yaml.SafeDumper):
    pass
