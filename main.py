import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile as StarletteUploadFile

import catalog
from auth import authenticate, require_admin, token_for
from branding import BrandingStore, validate_logo_upload
from database import get_db
from errors import NotFound, TransientIOError, ValidationError
from notifications import send_order_notification
from orders import (
    PAPER_PRICING,
    PRODUCT_CONFIGS,
    build_handoff_link,
    catalog_order_message,
    compute_pricing,
    generate_order_id,
    get_product_config,
    render_order_summary,
    validate_fields,
)
from schemas import ApiModel, CatalogProduct, LogoHistoryEntry, OrderDraft
from storage import decode, load_upload, logo_path, product_image_path, save_upload

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("siraq")

MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024

app = FastAPI(title="Siraq Studio API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS", "PATCH", "DELETE", "POST", "PUT"],
    allow_headers=["*"],
)


# ---------- Utilities ----------

def to_http(e: Exception) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail={"error": e.message, "errors": e.errors})
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, TransientIOError):
        return HTTPException(status_code=503, detail=f"{e}. Please try again.")
    return HTTPException(status_code=500, detail=str(e))


def get_branding_store(db=Depends(get_db)) -> BrandingStore:
    return BrandingStore.from_db(db)


# ---------- Health & Test ----------

@app.get("/")
def root():
    return {"status": "ok", "service": "siraq-api"}


@app.get("/test")
def test_database(db=Depends(get_db)):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "collections": []
    }
    if db is not None:
        try:
            response["collections"] = db.list_collection_names()[:10]
            response["database"] = "✅ Connected & Working"
        except Exception as e:
            response["database"] = f"⚠️ Connected but Error: {str(e)[:80]}"
    return response


# ---------- Order wizard ----------

@app.get("/api/products/configs")
def list_product_configs():
    return PRODUCT_CONFIGS


@app.get("/api/products/configs/{kind}")
def product_config(kind: str):
    try:
        return get_product_config(kind)
    except NotFound as e:
        raise to_http(e)


@app.get("/api/paper-options")
def paper_options():
    return [{"id": key, **option.model_dump()} for key, option in PAPER_PRICING.items()]


class ValidateIn(ApiModel):
    product_type: str
    values: Dict[str, Any] = {}


@app.post("/api/orders/validate")
def validate_order_fields(payload: ValidateIn):
    try:
        config = get_product_config(payload.product_type)
    except NotFound as e:
        raise to_http(e)
    return validate_fields(config, payload.values)


class QuoteIn(ApiModel):
    product_type: str
    quantity: Any = 1
    paper_type: str = "standard"


@app.post("/api/orders/quote")
def quote_order(payload: QuoteIn):
    try:
        config = get_product_config(payload.product_type)
        return compute_pricing(config, payload.quantity, payload.paper_type)
    except (NotFound, ValidationError) as e:
        raise to_http(e)


class PreviewIn(QuoteIn):
    values: Dict[str, Any] = {}
    order_id: Optional[str] = None


@app.post("/api/orders/preview")
def preview_order(payload: PreviewIn, store: BrandingStore = Depends(get_branding_store)):
    """Price the order, render the WhatsApp summary and build the hand-off link."""
    try:
        config = get_product_config(payload.product_type)
        result = validate_fields(config, payload.values)
        if not result["valid"]:
            raise ValidationError("Missing required fields", result["errors"])
        draft = OrderDraft(
            product_type=config.id,
            values=payload.values,
            pricing=compute_pricing(config, payload.quantity, payload.paper_type),
            order_id=payload.order_id or generate_order_id(),
        )
        message = render_order_summary(draft)
    except (NotFound, ValidationError) as e:
        raise to_http(e)
    return {
        "orderId": draft.order_id,
        "pricing": draft.pricing,
        "message": message,
        "link": build_handoff_link(message, store.get_config().whatsapp),
    }


# ---------- Order intake ----------

def _notify(store: BrandingStore, order_id, product_type, order_details, attachments):
    return send_order_notification(order_id, product_type, order_details, store.get_config().whatsapp, attachments)


@app.api_route("/api/orders", methods=["GET", "PUT", "PATCH", "DELETE", "OPTIONS"])
def orders_other_methods(request: Request):
    if request.method == "OPTIONS":
        return Response(status_code=200)
    return JSONResponse(status_code=405, content={"error": "Method not allowed"})


@app.post("/api/orders")
async def submit_order(request: Request, store: BrandingStore = Depends(get_branding_store)):
    """
    Receive a confirmed order (multipart: orderId, productType, orderDetails, files).

    The notification email is best effort; the order is acknowledged even if it fails.
    """
    try:
        form = await request.form()
        order_id = form.get("orderId")
        product_type = form.get("productType")
        order_details = form.get("orderDetails")
        if not order_id or not product_type or order_details is None:
            raise ValueError("orderId, productType and orderDetails are required")

        attachments = []
        for _, value in form.multi_items():
            if isinstance(value, StarletteUploadFile):
                content = await value.read()
                if len(content) > MAX_ATTACHMENT_BYTES:
                    raise ValueError(f"Attachment {value.filename} exceeds 10MB")
                attachments.append((value.filename or "attachment", value.content_type, content))

        logger.info("Order received: orderId=%s productType=%s files=%d", order_id, product_type, len(attachments))

        try:
            await run_in_threadpool(_notify, store, order_id, product_type, order_details, attachments)
        except Exception as e:
            logger.error("Email error for order %s: %s", order_id, e)

        return {"success": True, "orderId": order_id, "message": "Order submitted successfully"}
    except Exception as e:
        logger.error("Order submission error: %s", e)
        return JSONResponse(status_code=500, content={"error": "Failed to process order"})


# ---------- Public site ----------

@app.get("/api/site/config")
def site_config(store: BrandingStore = Depends(get_branding_store)):
    return store.get_config()


@app.get("/api/catalog")
def list_catalog(db=Depends(get_db)):
    try:
        return catalog.list_products(db)
    except TransientIOError as e:
        raise to_http(e)


@app.get("/api/catalog/{product_id}/order-link")
def catalog_order_link(product_id: str, db=Depends(get_db), store: BrandingStore = Depends(get_branding_store)):
    try:
        product = catalog.get_product(db, product_id)
    except (NotFound, TransientIOError) as e:
        raise to_http(e)
    message = catalog_order_message(product["name"], product["price"])
    return {"message": message, "link": build_handoff_link(message, store.get_config().whatsapp)}


@app.get("/api/uploads/{path:path}")
def get_upload(path: str, db=Depends(get_db)):
    try:
        upload = load_upload(db, path)
    except (NotFound, TransientIOError) as e:
        raise to_http(e)
    return Response(content=decode(upload), media_type=upload.content_type)


# ---------- Admin ----------

class LoginBody(BaseModel):
    email: str
    password: str


@app.post("/auth/login")
def login(body: LoginBody, db=Depends(get_db)):
    if db is None:
        raise HTTPException(500, "Database not configured")
    user = authenticate(db, body.email, body.password)
    if not user:
        raise HTTPException(status_code=400, detail="Incorrect email or password")
    if not user.get("admin"):
        raise HTTPException(status_code=403, detail="Admin access required")
    return {"access_token": token_for(user), "token_type": "bearer"}


class ContactIn(ApiModel):
    whatsapp: str


@app.put("/api/admin/site/contact")
def update_contact(payload: ContactIn, admin=Depends(require_admin), store: BrandingStore = Depends(get_branding_store)):
    if not payload.whatsapp.strip():
        raise to_http(ValidationError("Contact number is required", {"whatsapp": "Required"}))
    try:
        return store.update_contact_number(payload.whatsapp.strip())
    except TransientIOError as e:
        raise to_http(e)


@app.post("/api/admin/site/logo")
async def upload_logo(
    file: UploadFile = File(...),
    admin=Depends(require_admin),
    db=Depends(get_db),
    store: BrandingStore = Depends(get_branding_store),
):
    content = await file.read()
    try:
        validate_logo_upload(file.content_type, len(content))
        filename = file.filename or "logo"
        url = await run_in_threadpool(save_upload, db, logo_path(filename), filename, file.content_type, content)
        return await run_in_threadpool(store.replace_logo, url, admin["email"], datetime.now(timezone.utc))
    except (ValidationError, TransientIOError) as e:
        logger.error("Error uploading logo: %s", e)
        raise to_http(e)


@app.delete("/api/admin/site/logo")
def remove_logo(admin=Depends(require_admin), store: BrandingStore = Depends(get_branding_store)):
    try:
        return store.remove_logo()
    except TransientIOError as e:
        raise to_http(e)


@app.post("/api/admin/site/logo/revert")
def revert_logo(entry: LogoHistoryEntry, admin=Depends(require_admin),
                store: BrandingStore = Depends(get_branding_store)):
    try:
        return store.revert_to(entry)
    except TransientIOError as e:
        raise to_http(e)


@app.get("/api/admin/products")
def admin_list_products(admin=Depends(require_admin), db=Depends(get_db)):
    try:
        return catalog.list_products(db)
    except TransientIOError as e:
        raise to_http(e)


@app.post("/api/admin/products", status_code=201)
async def admin_add_product(
    name: str = Form(...),
    price: float = Form(...),
    description: str = Form(""),
    image_url: str = Form("", alias="imageUrl"),
    image: Optional[UploadFile] = File(None),
    admin=Depends(require_admin),
    db=Depends(get_db),
):
    try:
        if image is not None and image.filename:
            content = await image.read()
            image_url = await run_in_threadpool(
                save_upload, db, product_image_path(name), image.filename, image.content_type, content,
            )
        product = CatalogProduct(name=name, price=price, description=description, image_url=image_url)
        product_id = await run_in_threadpool(catalog.add_product, db, product)
        return {"id": product_id, "imageUrl": image_url}
    except PydanticValidationError as e:
        raise to_http(ValidationError("Invalid product", {str(err["loc"][0]): err["msg"] for err in e.errors()}))
    except TransientIOError as e:
        raise to_http(e)


class ProductUpdate(ApiModel):
    name: Optional[str] = None
    price: Optional[float] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


@app.patch("/api/admin/products/{product_id}")
def admin_update_product(product_id: str, payload: ProductUpdate, admin=Depends(require_admin), db=Depends(get_db)):
    try:
        return catalog.update_product(db, product_id, payload.model_dump(exclude_unset=True))
    except (ValidationError, NotFound, TransientIOError) as e:
        raise to_http(e)


@app.delete("/api/admin/products/{product_id}")
def admin_delete_product(product_id: str, admin=Depends(require_admin), db=Depends(get_db)):
    try:
        catalog.delete_product(db, product_id)
    except (NotFound, TransientIOError) as e:
        raise to_http(e)
    return {"status": "deleted"}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
