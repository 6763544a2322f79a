import json
import urllib.request

# Bypass any proxy configured in the environment
opener = urllib.request.build_opener(urllib.request.ProxyHandler({}))


def fetch(url, headers=None, method="GET"):
    request = urllib.request.Request(url, headers=headers or {}, method=method)
    with opener.open(request, timeout=5) as response:
        return response.status, response.headers, response.read()


def fetch_json(url):
    status, headers, body = fetch(url)
    return status, headers, json.loads(body)
