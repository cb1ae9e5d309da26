"""
Waymark - sample application

This demonstrates named routes, URL generation and route collections.
Run with: uv run uvicorn sample:app --reload
"""


import logging

from waymark import JSONResponse, Request, Router, Waymark
from waymark.middleware import RequestLoggingMiddleware

# =============================================================================
# Application Setup
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
)
logger = logging.getLogger("waymark.sample")

app: Waymark = Waymark(debug=True, title="Waymark Demo")

app.add_middleware(RequestLoggingMiddleware)


# =============================================================================
# Routes - Pages
# =============================================================================


@app.get("home", "/")
async def home(request: Request) -> dict:
    """Index of the demo with links built from route names."""
    return {
        "message": "Hello from Waymark",
        "links": {
            "blog": request.url_for("blog_list"),
            "article": request.url_for("article_show", id=42),
            "contact": request.url_for("contact"),
        },
    }


@app.route("contact", "/contact", methods=["GET", "POST"])
async def contact(request: Request) -> JSONResponse:
    if request.method == "POST":
        data = await request.json()
        return JSONResponse({"received": data}, status_code=201)
    return JSONResponse({"form": request.url_for("contact")})


# =============================================================================
# Routes - Placeholders, Requirements & Defaults
# =============================================================================


@app.get(
    "blog_list",
    "/blog/{page}",
    defaults={"page": 1},
    requirements={"page": r"\d+"},
)
async def blog_list(request: Request, page: str | int) -> dict:
    """/blog and /blog/1 both reach this handler."""
    page = int(page)
    return {
        "page": page,
        "next": request.url_for("blog_list", page=page + 1),
    }


@app.get("article_show", "/article/{id}", requirements={"id": r"\d+"})
async def article_show(request: Request, id: str) -> dict:
    return {"id": int(id), "route": request.route}


@app.get(
    "blog_post",
    "/blog/{year}/{month}/{slug}",
    requirements={"year": r"\d{4}", "month": r"\d{2}", "slug": "[a-z0-9-]+"},
)
async def blog_post(request: Request, year: str, month: str, slug: str) -> dict:
    return {"year": year, "month": month, "slug": slug}


@app.get("old_article", "/a/{id}", requirements={"id": r"\d+"})
async def old_article(request: Request, id: str):
    """Permanent redirect to the canonical article URL."""
    return app.redirect_to("article_show", status_code=301, id=id)


# =============================================================================
# Route Collection Example - Admin
# =============================================================================

admin = Router()


async def admin_users(request: Request) -> dict:
    return {"users": [], "self": request.url_for("admin_users")}


async def admin_user_edit(request: Request, id: str) -> dict:
    return {"id": int(id)}


admin.add_route("users", "/users", handler=admin_users, methods=["GET"])
admin.add_route(
    "user_edit",
    "/users/{id}",
    handler=admin_user_edit,
    methods=["GET", "PUT"],
    requirements={"id": r"\d+"},
)

# Mounted as /admin/users and /admin/users/{id}, named admin_users / admin_user_edit
admin.routes.add_prefix("/admin")
admin.routes.add_name_prefix("admin_")
app.router.routes.add_collection(admin.routes)


# =============================================================================
# Main Entry Point
# =============================================================================


def main() -> None:
    """Run the Waymark sample application."""
    for name, route in app.router.routes.items():
        logger.info("%-16s %-10s %s", name, ", ".join(route.methods) or "ANY", route.path)

    app.run(
        host="127.0.0.1",
        port=8000,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
