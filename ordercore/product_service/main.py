# ordercore/product_service/main.py
"""
Atrapa katalogu do developmentu: ordercore pyta tylko o snapshot produktu.
Uruchomienie: uvicorn ordercore.product_service.main:app --port 8001
"""
from decimal import Decimal

from fastapi import FastAPI, HTTPException

from ordercore.domain.schemas import ProductSnapshot

app = FastAPI(title="Catalog (dev mock)")

CATALOG = {
    p.id: p
    for p in [
        ProductSnapshot(id=1, name="Mixer tap, chrome", price=Decimal("4500.00")),
        ProductSnapshot(id=2, name="PPR pipe 20mm, 4m", price=Decimal("320.00")),
        ProductSnapshot(id=3, name="Ball valve 1/2\"", price=Decimal("650.00")),
        # wycofany - add_item i checkout go odrzuca
        ProductSnapshot(id=4, name="Wall-hung toilet (old series)", price=Decimal("18900.00"), is_active=False),
    ]
}


@app.get("/products/{product_id}", response_model=ProductSnapshot)
def get_product_snapshot(product_id: int):
    product = CATALOG.get(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product not found: {product_id}")
    return product


@app.get("/products", response_model=list[ProductSnapshot])
def list_products(active_only: bool = False):
    return [p for p in CATALOG.values() if p.is_active or not active_only]
