from typing import Optional, Dict, Any
from fastapi.testclient import TestClient

def api_call(client: TestClient, method: str, path: str, headers: Optional[Dict[str, str]] = None, json: Optional[Dict[str, Any]] = None, expected_status: int = 200):
    response = client.request(method, path, headers=headers, json=json)
    try:
        body = response.json()
    except ValueError:
        body = response.text
    assert response.status_code == expected_status, f"{method} {path} => {response.status_code}, body={body}, json={json}"
    return body

def assert_error(response, status_code: int, code: str, message: Optional[str] = None):
    assert response.status_code == status_code, response.text
    error = response.json()["error"]
    assert error["code"] == code
    if message is not None:
        assert message in error["message"]
    return error

def complete_lecture(client: TestClient, headers: Dict[str, str], lecture_id: int, is_completed: bool = True) -> Dict[str, Any]:
    return api_call(
        client, "POST", f"/lectures/{lecture_id}/progress", headers=headers, json={"is_completed": is_completed}
    )["data"]
