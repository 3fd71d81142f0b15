import json

import yaml

from viewring.core.ports.render import Renderer


def normalize(obj):
    if isinstance(obj, dict):
        return {normalize(k): normalize(v) for k, v in obj.items()}

    if isinstance(obj, (set, frozenset)):
        return sorted(normalize(x) for x in obj)

    if isinstance(obj, (list, tuple)):
        return [normalize(x) for x in obj]

    return obj


class JsonRenderer(Renderer):
    def render(self, data: dict) -> str:
        return json.dumps(normalize(data), indent=2, sort_keys=False)


class YamlRenderer(Renderer):
    def render(self, data: dict) -> str:
        return yaml.safe_dump(normalize(data), sort_keys=False)


RENDERERS: dict[str, type[Renderer]] = {
    "json": JsonRenderer,
    "yaml": YamlRenderer,
}
