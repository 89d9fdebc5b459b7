from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import Depends, FastAPI, File, Header, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from listing_api.auth import AuthService
from listing_api.catalog import PropertyCatalog
from listing_api.config import (
    app_env,
    cloudinary_folder,
    cors_origins,
    enforce_secure_secrets,
    is_local_dev,
    jwt_exp_hours,
    jwt_secret,
    log_format,
    log_level,
    search_timeout_seconds,
    typesense_api_key,
    typesense_collection,
    typesense_url,
)
from listing_api.db import make_engine, make_session_factory
from listing_api.exceptions import (
    BadPassword,
    DuplicateEmail,
    InvalidToken,
    MissingToken,
    NotFound,
    SearchError,
    UnknownEmail,
    UploadError,
    ValidationError,
)
from listing_api.logs import setup_logging
from listing_api.models import Base
from listing_api.schemas import (
    LoginIn,
    PropertyCreate,
    PropertyUpdate,
    RegisterIn,
    UserAccIn,
    UserUpdate,
    ViewIn,
    property_out,
    user_out,
)
from listing_api.search import SearchIndex
from listing_api.security import TokenSigner
from listing_api.utils.cloudinary_config import configure_cloudinary
from listing_api.utils.cloudinary_storage import MediaUploader
from listing_api.views import ViewPolicy

logger = logging.getLogger(__name__)

SERVER_ERROR = "Server error, please try again later"


def _error(status_code: int, **body: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body)


# -----------------------
# Dependencies
# -----------------------
def get_auth(request: Request) -> AuthService:
    return request.app.state.auth


def get_catalog(request: Request) -> PropertyCatalog:
    return request.app.state.catalog


def get_view_policy(request: Request) -> ViewPolicy:
    return request.app.state.views


def get_uploader(request: Request) -> MediaUploader:
    return request.app.state.uploader


def get_search_index(request: Request) -> SearchIndex:
    return request.app.state.search


def _parse_liked(raw: str | None) -> bool | None:
    if not raw:
        return None
    return raw == "true"


def prepare_search_index(search: SearchIndex, catalog: PropertyCatalog) -> None:
    """
    Make sure the collection exists. A freshly created one is filled from the
    catalog. Failures are logged; the API still starts and /search reports them.
    """
    try:
        created = search.ensure_collection()
    except SearchError:
        logger.exception("Search collection setup failed")
        return
    if created:
        props = catalog.list()
        for prop in props:
            search.index_property(property_out(prop))
        logger.info("Indexed %d existing properties", len(props))


def create_app(
    *,
    session_factory: sessionmaker[Session] | None = None,
    signer: TokenSigner | None = None,
    uploader: MediaUploader | None = None,
    search_index: SearchIndex | None = None,
    view_policy: ViewPolicy | None = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Build the API with its storage handle and external clients. Anything not
    passed in is built from environment configuration.
    """
    if configure_logging:
        setup_logging(log_level(), log_format())

    if session_factory is None:
        # Production hardening: ensure we don't run with dangerous defaults.
        enforce_secure_secrets()
        engine = make_engine()
        if is_local_dev():
            # Local sqlite runs skip alembic.
            Base.metadata.create_all(engine)
        session_factory = make_session_factory(engine)
    if signer is None:
        signer = TokenSigner(jwt_secret(), exp_hours=jwt_exp_hours())
    if uploader is None:
        uploader = MediaUploader(folder=cloudinary_folder(), enabled=configure_cloudinary())
    if search_index is None:
        search_index = SearchIndex(
            base_url=typesense_url(),
            api_key=typesense_api_key(),
            collection=typesense_collection(),
            timeout=search_timeout_seconds(),
        )

    app = FastAPI(title="Property Listing API")
    app.state.auth = AuthService(session_factory, signer)
    app.state.catalog = PropertyCatalog(session_factory)
    app.state.views = view_policy or ViewPolicy(session_factory)
    app.state.uploader = uploader
    app.state.search = search_index
    if search_index.enabled:
        prepare_search_index(search_index, app.state.catalog)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        msg = "Invalid request"
        if errors:
            first = errors[0]
            loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
            msg = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))
        return _error(400, error=msg)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, error=SERVER_ERROR)

    register_routes(app)
    logger.info("API ready (env=%s)", app_env())
    return app


def register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health():
        return {"ok": True}

    # -----------------------
    # Media
    # -----------------------
    @app.post("/upload")
    def upload_image(
        uploader: Annotated[MediaUploader, Depends(get_uploader)],
        image: UploadFile = File(...),
    ):
        try:
            raw = image.file.read()
            url = uploader.upload(raw, filename=image.filename or "")
        except UploadError:
            logger.exception("Upload failed filename=%r content_type=%r", image.filename, image.content_type)
            return _error(500, error="Upload failed")
        return {"url": url}

    # -----------------------
    # Auth / users
    # -----------------------
    @app.post("/register")
    def register(data: RegisterIn, auth: Annotated[AuthService, Depends(get_auth)]):
        try:
            token, user = auth.register(data)
        except DuplicateEmail as e:
            return _error(400, error=str(e))
        except Exception:
            logger.exception("Register failed")
            return _error(500, error=SERVER_ERROR)
        return {"token": token, "user": user_out(user)}

    @app.post("/login")
    def login(data: LoginIn, auth: Annotated[AuthService, Depends(get_auth)]):
        try:
            token, user = auth.login(data.email, data.password)
        except UnknownEmail as e:
            return _error(400, emailError=str(e))
        except BadPassword as e:
            return _error(400, passError=str(e))
        except Exception:
            logger.exception("Login failed")
            return _error(500, error=SERVER_ERROR)
        return {"token": token, "user": user_out(user)}

    @app.post("/userAcc")
    def user_account(data: UserAccIn, auth: Annotated[AuthService, Depends(get_auth)]):
        try:
            user = auth.get_profile(data.user_id)
        except NotFound as e:
            return _error(400, error=str(e))
        except Exception:
            logger.exception("User lookup failed user_id=%s", data.user_id)
            return _error(500, error=SERVER_ERROR)
        return {"user": user_out(user)}

    @app.get("/validate")
    def validate(
        auth: Annotated[AuthService, Depends(get_auth)],
        authorization: Annotated[str | None, Header()] = None,
    ):
        try:
            user_id = auth.validate_token(authorization)
        except MissingToken as e:
            return _error(401, error=str(e))
        except InvalidToken:
            return _error(500, error="Check your connection")
        return {"valid": True, "userId": user_id}

    @app.put("/user/{user_id}")
    def update_user(user_id: int, data: UserUpdate, auth: Annotated[AuthService, Depends(get_auth)]):
        try:
            user = auth.update_profile(user_id, data)
        except NotFound as e:
            return _error(404, error=str(e))
        except Exception:
            logger.exception("User update failed user_id=%s", user_id)
            return _error(500, error=SERVER_ERROR)
        return user_out(user)

    # -----------------------
    # Views
    # -----------------------
    @app.post("/views")
    def register_view(data: ViewIn, views: Annotated[ViewPolicy, Depends(get_view_policy)]):
        try:
            count = views.register_view(data.user_id, data.property_id)
        except Exception:
            # Unknown properties end up here too (opaque 500, not 404).
            logger.exception("Register view failed user_id=%s property_id=%s", data.user_id, data.property_id)
            return _error(500, error="Failed to register view")
        return {"views": count}

    # -----------------------
    # Properties
    # -----------------------
    @app.post("/properties", status_code=201)
    def create_property(
        data: PropertyCreate,
        catalog: Annotated[PropertyCatalog, Depends(get_catalog)],
        search: Annotated[SearchIndex, Depends(get_search_index)],
    ):
        try:
            prop = catalog.create(data)
        except ValidationError as e:
            return _error(400, error=str(e))
        except Exception as e:
            logger.exception("Create property failed")
            return _error(400, error=str(e) or "Invalid property")
        out = property_out(prop)
        search.index_property(out)
        return out

    @app.get("/properties")
    def list_properties(
        catalog: Annotated[PropertyCatalog, Depends(get_catalog)],
        liked: str | None = None,
        location: str | None = None,
        title: str | None = None,
    ):
        try:
            items = catalog.list(liked=_parse_liked(liked), location=location, title=title)
        except Exception as e:
            logger.exception("List properties failed")
            return _error(500, error=str(e) or SERVER_ERROR)
        return [property_out(p) for p in items]

    @app.get("/properties/{property_id}")
    def get_property(property_id: int, catalog: Annotated[PropertyCatalog, Depends(get_catalog)]):
        try:
            prop = catalog.get(property_id)
        except NotFound as e:
            return _error(404, error=str(e))
        return property_out(prop)

    @app.put("/properties/{property_id}")
    def update_property(
        property_id: int,
        data: PropertyUpdate,
        catalog: Annotated[PropertyCatalog, Depends(get_catalog)],
        search: Annotated[SearchIndex, Depends(get_search_index)],
    ):
        try:
            prop = catalog.update(property_id, data)
        except NotFound as e:
            return _error(404, error=str(e))
        except ValidationError as e:
            return _error(400, error=str(e))
        except Exception as e:
            logger.exception("Update property failed property_id=%s", property_id)
            return _error(400, error=str(e) or "Invalid property")
        out = property_out(prop)
        search.index_property(out)
        return out

    # -----------------------
    # Search
    # -----------------------
    @app.get("/search")
    def search_properties(
        search: Annotated[SearchIndex, Depends(get_search_index)],
        catalog: Annotated[PropertyCatalog, Depends(get_catalog)],
        q: str = "",
    ):
        try:
            ids = search.search(q)
        except SearchError as e:
            logger.exception("Search failed q=%r", q)
            return _error(500, error=str(e))
        # Ranked ids are resolved against the catalog; ids with no row drop out.
        return [property_out(p) for p in catalog.get_many(ids)]
