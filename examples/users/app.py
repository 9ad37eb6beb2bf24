"""Users API — routes, path parameters, and middleware chains.

Demonstrates:
- Chained route registration (``app.route(...).get(...).delete(...)``)
- A sync middleware that short-circuits (token check)
- An async middleware that wraps the rest of the chain (timing header)
- A custom not-found chain

Run:
    cd examples/users && uvicorn app:app
"""

import time

from waypost import App, Request, Response

app = App()

USERS: dict[str, dict[str, str]] = {
    "1": {"id": "1", "name": "Ada"},
    "2": {"id": "2", "name": "Grace"},
}

TOKEN = "Bearer letmein"


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


async def timing(request: Request, response: Response, proceed) -> None:
    start = time.monotonic()
    response.set_header("X-Started", f"{start:.6f}")
    await proceed()


def require_token(request: Request, response: Response, proceed):
    if request.headers.get("authorization") != TOKEN:
        response.set_status(401)
        return response.end("Unauthorized")
    request.state["user"] = "admin"
    return proceed()


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def list_users(request: Request, response: Response) -> None:
    await response.json(sorted(USERS.values(), key=lambda u: u["id"]))


async def show_user(request: Request, response: Response) -> None:
    user = USERS.get(request.params["id"] or "")
    if user is None:
        await response.set_status(404).json({"error": "no such user"})
        return
    await response.json(user)


async def create_user(request: Request, response: Response) -> None:
    data = await request.json()
    user_id = str(len(USERS) + 1)
    USERS[user_id] = {"id": user_id, "name": data["name"]}
    response.set_status(201).set_header("Location", f"/users/{user_id}")
    await response.json(USERS[user_id])


async def delete_user(request: Request, response: Response) -> None:
    USERS.pop(request.params["id"] or "", None)
    await response.set_status(204).end()


async def not_found(request: Request, response: Response) -> None:
    await response.set_status(404).send(f"Nothing at {request.path}")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

app.route("/users").get(timing, list_users).post(require_token, create_user)
app.route("/users/:id(\\d+)").get(timing, show_user).delete(require_token, delete_user)
app.not_found(not_found)
