import json


def parse_labels(raw):
    """
    Parse category/tag form input into an ordered list of strings.

    The editor's tag widget posts JSON like '[{"value": "Anime"}, ...]';
    plain forms post a bare string. Anything that looks like JSON but does
    not parse into that shape yields an empty list.
    """
    if raw is None:
        return []
    raw = str(raw).strip()
    if not raw:
        return []

    if raw[0] not in '[{"':
        return [raw]

    try:
        data = json.loads(raw)
    except ValueError:
        return []

    if isinstance(data, str):
        data = [data]
    elif isinstance(data, dict):
        data = [data]
    elif not isinstance(data, list):
        return []

    labels = []
    for item in data:
        if isinstance(item, dict):
            value = item.get('value')
        else:
            value = item
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            return []
        value = str(value).strip()
        if value and value not in labels:
            labels.append(value)
    return labels
