import requests

from incendios_cierre.config.settings import API_BASE_URL, API_TIMEOUT


class ApiClient:
    """
    Cliente REST del backend de incendios. JSON de ida y vuelta, token
    Bearer opcional. Los errores HTTP se propagan como ``requests.HTTPError``
    y no se reintenta nada.
    """

    def __init__(self, base_url: str = None, timeout: float = None):
        self.base_url = (base_url or API_BASE_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else API_TIMEOUT
        self.token = None

    def set_token(self, token: str):
        self.token = token

    def _headers(self):
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, **kwargs):
        # "cierre/x" y "/cierre/x" apuntan a lo mismo
        url = f"{self.base_url}/{path.lstrip('/')}"
        send = getattr(requests, method)
        response = send(url, headers=self._headers(), timeout=self.timeout, **kwargs)
        response.raise_for_status()
        # 204 y similares llegan sin cuerpo
        return response.json() if response.content else None

    def get(self, path: str, params: dict = None):
        return self._request("get", path, params=params)

    def post(self, path: str, data: dict = None):
        return self._request("post", path, json=data if data is not None else {})

    def patch(self, path: str, data: dict):
        return self._request("patch", path, json=data)

    def put(self, path: str, data: dict):
        return self._request("put", path, json=data)

    def delete(self, path: str):
        return self._request("delete", path)
