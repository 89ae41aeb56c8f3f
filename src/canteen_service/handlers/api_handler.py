"""FastAPI application for the canteen API.

Route handlers stay thin: they gate writes on a credential, call one service
operation and render the returned Outcome.
"""

import logging
from typing import Annotated, Any

from fastapi import Body, Depends, FastAPI, Header, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from canteen_service.auth.api_dependencies import require_credential
from canteen_service.auth.credential_gate import Authorized, CredentialGate
from canteen_service.models.outcome import Outcome
from canteen_service.services.menu_item_service import MenuItemService
from canteen_service.services.menu_service import MenuService
from canteen_service.services.recipe_service import RecipeFile, RecipeService
from canteen_service.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

JsonBody = Annotated[dict[str, Any], Body()]


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


def render(outcome: Outcome) -> JSONResponse:
    """Render an Outcome as a JSON response."""
    return JSONResponse(status_code=outcome.status_code, content=jsonable_encoder(outcome.body()))


def create_app(
    menu_service: MenuService,
    menu_item_service: MenuItemService,
    recipe_service: RecipeService,
    settings_service: SettingsService,
    credentials: list[str],
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        menu_service: Service for day menus
        menu_item_service: Service for menu items
        recipe_service: Service for recipes
        settings_service: Service for food pantry and opening hours
        credentials: Bearer credentials accepted for write operations

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Canteen API",
        description="Menus, menu items, recipes, opening hours and food pantry information",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.state.menu_service = menu_service
    app.state.menu_item_service = menu_item_service
    app.state.recipe_service = recipe_service
    app.state.settings_service = settings_service
    app.state.credential_gate = CredentialGate(credentials=credentials)

    @app.exception_handler(RequestValidationError)
    async def invalid_request(_request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info(f"Rejected request body: {len(exc.errors())} validation error(s)")
        return render(Outcome.bad_request())

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    def authorize(
        authorization: str | None = Header(None),
        x_api_key: str | None = Header(None),
    ) -> Authorized:
        """Dependency to require a valid bearer credential."""
        return require_credential(
            authorization=authorization,
            x_api_key=x_api_key,
            gate=app.state.credential_gate,
        )

    @app.get("/", response_class=PlainTextResponse, tags=["Health"])
    async def home() -> str:
        return "Home Page"

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint.

        Returns:
            Health status indicating service is running
        """
        return HealthResponse(status="healthy")

    # Menu items. /menu, /food_pantry and /opening_hours stay as read paths
    # for existing clients.

    @app.get("/menu", include_in_schema=False)
    @app.get("/menu-items", tags=["Menu Items"])
    async def list_menu_items() -> JSONResponse:
        return render(await app.state.menu_item_service.list_menu_items())

    @app.get("/menu-items/{menu_item_id}", tags=["Menu Items"])
    async def get_menu_item(menu_item_id: str) -> JSONResponse:
        return render(await app.state.menu_item_service.get_menu_item(menu_item_id))

    @app.post("/menu-items", tags=["Menu Items"])
    async def create_menu_item(
        payload: JsonBody,
        caller: Authorized = Depends(authorize),
    ) -> JSONResponse:
        """Create a menu item. The price is stored with two fractional digits."""
        logger.info(f"Menu item create requested by {caller.identity}")
        return render(await app.state.menu_item_service.create_menu_item(payload))

    @app.put("/menu-items/{menu_item_id}", tags=["Menu Items"])
    async def update_menu_item(
        menu_item_id: str,
        payload: JsonBody,
        caller: Authorized = Depends(authorize),
    ) -> JSONResponse:
        logger.info(f"Menu item {menu_item_id} update requested by {caller.identity}")
        return render(await app.state.menu_item_service.update_menu_item(menu_item_id, payload))

    @app.delete("/menu-items/{menu_item_id}", tags=["Menu Items"])
    async def delete_menu_item(
        menu_item_id: str,
        caller: Authorized = Depends(authorize),
    ) -> JSONResponse:
        logger.info(f"Menu item {menu_item_id} delete requested by {caller.identity}")
        return render(await app.state.menu_item_service.delete_menu_item(menu_item_id))

    # Menus

    @app.get("/menus", tags=["Menus"])
    async def get_all_menus() -> JSONResponse:
        """Get every day menu with its menu items expanded."""
        return render(await app.state.menu_service.get_all_menus())

    @app.get("/menus/{day}", tags=["Menus"])
    async def get_menu(day: str) -> JSONResponse:
        return render(await app.state.menu_service.get_menu(day))

    @app.post("/menus/{day}/items", tags=["Menus"])
    async def add_menu_item_to_day(
        day: str,
        payload: JsonBody,
        caller: Authorized = Depends(authorize),
    ) -> JSONResponse:
        """Append a menu item reference to a day menu.

        Body:
            menuItemId: Identifier of an existing menu item
        """
        logger.info(f"Add to menu {day} requested by {caller.identity}")
        return render(await app.state.menu_service.add_item(day, payload.get("menuItemId")))

    @app.delete("/menus/{day}/items/{menu_item_id}", tags=["Menus"])
    async def remove_menu_item_from_day(
        day: str,
        menu_item_id: str,
        caller: Authorized = Depends(authorize),
    ) -> JSONResponse:
        logger.info(f"Remove from menu {day} requested by {caller.identity}")
        return render(await app.state.menu_service.remove_item(day, menu_item_id))

    # Recipes

    @app.get("/recipes", tags=["Recipes"])
    async def list_recipes() -> JSONResponse:
        return render(await app.state.recipe_service.list_recipes())

    @app.get("/recipes/{recipe_id}", tags=["Recipes"])
    async def get_recipe(recipe_id: str) -> JSONResponse:
        return render(await app.state.recipe_service.get_recipe(recipe_id))

    @app.post("/recipes", tags=["Recipes"])
    async def create_recipe(
        payload: JsonBody,
        caller: Authorized = Depends(authorize),
    ) -> JSONResponse:
        logger.info(f"Recipe create requested by {caller.identity}")
        return render(await app.state.recipe_service.create_recipe(payload))

    @app.post("/recipes/upload", tags=["Recipes"])
    async def upload_recipe(
        request: Request,
        title: str | None = None,
        description: str | None = None,
        allergens: str | None = None,
        caller: Authorized = Depends(authorize),
    ) -> JSONResponse:
        """Upload a recipe PDF as the raw request body.

        Recipe metadata is passed as query parameters.
        """
        logger.info(f"Recipe upload requested by {caller.identity}")
        outcome = await app.state.recipe_service.upload_recipe(
            {"title": title, "description": description, "allergens": allergens},
            await request.body(),
            request.headers.get("content-type"),
        )
        return render(outcome)

    @app.get("/recipes/{recipe_id}/file", tags=["Recipes"], response_model=None)
    async def download_recipe(recipe_id: str) -> Response:
        outcome = await app.state.recipe_service.download_recipe(recipe_id)
        if not outcome.is_success:
            return render(outcome)

        recipe_file: RecipeFile = outcome.payload
        return Response(
            content=recipe_file.content,
            media_type=recipe_file.content_type,
            headers={"Content-Disposition": f'attachment; filename="{recipe_file.file_name}"'},
        )

    @app.delete("/recipes/{recipe_id}", tags=["Recipes"])
    async def delete_recipe(
        recipe_id: str,
        caller: Authorized = Depends(authorize),
    ) -> JSONResponse:
        logger.info(f"Recipe {recipe_id} delete requested by {caller.identity}")
        return render(await app.state.recipe_service.delete_recipe(recipe_id))

    # Settings

    @app.get("/food_pantry", include_in_schema=False)
    @app.get("/food-pantry", tags=["Settings"])
    async def get_food_pantry() -> JSONResponse:
        return render(await app.state.settings_service.get_food_pantry())

    @app.put("/food-pantry", tags=["Settings"])
    async def update_food_pantry(
        payload: JsonBody,
        caller: Authorized = Depends(authorize),
    ) -> JSONResponse:
        logger.info(f"Food pantry update requested by {caller.identity}")
        return render(
            await app.state.settings_service.update_food_pantry(payload.get("information"))
        )

    @app.get("/opening_hours", include_in_schema=False)
    @app.get("/opening-hours", tags=["Settings"])
    async def list_opening_hours() -> JSONResponse:
        return render(await app.state.settings_service.list_opening_hours())

    @app.put("/opening-hours", tags=["Settings"])
    async def update_opening_hours(
        payload: JsonBody,
        caller: Authorized = Depends(authorize),
    ) -> JSONResponse:
        logger.info(f"Opening hours update requested by {caller.identity}")
        return render(await app.state.settings_service.update_opening_hours(payload))

    return app
