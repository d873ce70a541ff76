"""
BiteCheck FastAPI application.

Endpoints:
    GET  /                      Health check
    GET  /products/{barcode}    Resolve barcode -> product + score
    GET  /products?q=           Search cached products (or list all)
    POST /products              User-submitted product
    POST /score                 Score an ad-hoc product body
    GET  /stats                 Product store statistics
    GET  /additives             Additive knowledge base
    GET  /additives/{query}     Look up one additive by code, name or alias
    POST /ingredients/classify  Tokens, assessments and nutrient tags for an ingredient list
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# Load env vars
load_dotenv(Path(__file__).parent / ".env")

from bitecheck.config import log_config
from bitecheck.evaluation import get_default_classifier, ingredient_nutrient_tags, score_product
from bitecheck.external_apis import SourceFallbackResolver
from bitecheck.knowledge import get_default_registry
from bitecheck.models.product import Product
from bitecheck.parsing import parse_ingredients
from bitecheck.scanner import is_valid_barcode
from bitecheck.storage import ProductStore

# Logger
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

log_config()

# Initialize App
app = FastAPI(title="BiteCheck API")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

store = ProductStore()
resolver = SourceFallbackResolver(store=store)


@app.on_event("shutdown")
def _close_resolver():
    resolver.close()


# --- Request/Response Models ---
class ProductBody(BaseModel):
    barcode: str = ""
    name: str = ""
    brand: Optional[str] = None
    category: Optional[str] = None
    ingredients_text: Optional[str] = None
    sugar_100g: Optional[float] = None
    salt_100g: Optional[float] = None
    saturated_fat_100g: Optional[float] = None
    calories_100g: Optional[float] = None
    protein_100g: Optional[float] = None
    carbs_100g: Optional[float] = None
    fat_100g: Optional[float] = None
    fiber_100g: Optional[float] = None
    serving_size: Optional[str] = None
    additives_count: Optional[int] = None
    image_url: Optional[str] = None


class ClassifyRequest(BaseModel):
    ingredients_text: str = Field(..., description="Raw ingredient list from the label")


class ProductResponse(BaseModel):
    found: bool
    product: Optional[Dict[str, Any]] = None
    score: Optional[Dict[str, Any]] = None
    source: Optional[str] = None


# --- Endpoints ---

@app.get("/")
def health_check():
    return {"status": "ok", "service": "BiteCheck"}


@app.get("/products/{barcode}", response_model=ProductResponse)
def get_product(barcode: str):
    """Source-fallback lookup. Not found is a normal response with found=false."""
    barcode = barcode.strip()
    if not is_valid_barcode(barcode):
        raise HTTPException(status_code=422, detail=f"invalid barcode: {barcode}")
    logger.info("LOOKUP barcode=%s", barcode)
    try:
        return resolver.resolve(barcode).to_dict()
    except Exception as e:
        logger.error("Lookup failed barcode=%s: %s", barcode, e, exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/products")
def list_products(q: Optional[str] = None, limit: int = 20):
    try:
        products = store.search(q, limit=limit) if q else store.all_products()
        return {"count": len(products), "products": [p.to_dict() for p in products]}
    except Exception as e:
        logger.error("Product listing failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/products")
def submit_product(body: ProductBody):
    """Store a user-entered product and return it with its score."""
    try:
        product = store.submit_product(body.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Submission failed barcode=%s: %s", body.barcode, e, exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "ok", "product": product.to_dict(), "score": score_product(product).to_dict()}


@app.post("/score")
def score(body: ProductBody):
    """Score a product that is not (or not yet) in the store."""
    try:
        data = body.model_dump()
        data["barcode"] = data["barcode"] or "adhoc"
        return score_product(Product.from_dict(data)).to_dict()
    except Exception as e:
        logger.error("Scoring failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/stats")
def stats():
    return {**store.stats(), "recent_submissions": store.recent_submissions()}


@app.get("/additives")
def list_additives():
    registry = get_default_registry()
    return {
        "version": registry.get_version(),
        "count": len(registry),
        "additives": [a.to_dict() for a in registry.all_additives()],
    }


@app.get("/additives/{query}")
def get_additive(query: str):
    additive = get_default_registry().lookup(query)
    if additive is None:
        raise HTTPException(status_code=404, detail=f"unknown additive: {query}")
    return additive.to_dict()


@app.post("/ingredients/classify")
def classify_ingredients(request: ClassifyRequest):
    tokens: List[str] = parse_ingredients(request.ingredients_text)
    classifier = get_default_classifier()
    return {
        "ingredients": tokens,
        "assessments": [classifier.classify(t).to_dict() for t in tokens],
        "nutrient_tags": ingredient_nutrient_tags(request.ingredients_text),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True)
