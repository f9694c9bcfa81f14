from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import JSONResponse
from typing import Optional

from controller.dependencies import get_ascolour_connector
from services.ascolour.base_connector import AsColourConnector
from utils.exceptions import AsColourAPIError
from utils.logger import logger

router = APIRouter()


def _error_response(error: AsColourAPIError, fallback_message: str) -> JSONResponse:
    return JSONResponse(
        status_code=error.status or 500,
        content={
            "error": str(error) or fallback_message,
            "details": error.details,
        }
    )


@router.get("/products")
def get_products(
    connector: AsColourConnector = Depends(get_ascolour_connector)
):
    """List catalog products (upstream body passed through)."""
    try:
        return connector.get_products()
    except AsColourAPIError as e:
        logger.error(f"Error fetching products: {e}")
        return _error_response(e, "Failed to fetch products")


@router.get("/products/{style_code}")
def get_product(
    style_code: str = Path(..., description="Product style code"),
    connector: AsColourConnector = Depends(get_ascolour_connector)
):
    try:
        return connector.get_product(style_code)
    except AsColourAPIError as e:
        logger.error(f"Error fetching product {style_code}: {e}")
        return _error_response(e, "Failed to fetch product details")


@router.get("/products/{style_code}/variants")
def get_product_variants(
    style_code: str = Path(..., description="Product style code"),
    connector: AsColourConnector = Depends(get_ascolour_connector)
):
    try:
        return connector.get_product_variants(style_code)
    except AsColourAPIError as e:
        logger.error(f"Error fetching variants for {style_code}: {e}")
        return _error_response(e, "Failed to fetch product variants")


@router.get("/products/{style_code}/images")
def get_product_images(
    style_code: str = Path(..., description="Product style code"),
    connector: AsColourConnector = Depends(get_ascolour_connector)
):
    try:
        return connector.get_product_images(style_code)
    except AsColourAPIError as e:
        logger.error(f"Error fetching images for {style_code}: {e}")
        return _error_response(e, "Failed to fetch product images")


@router.get("/colours")
def get_colours(
    connector: AsColourConnector = Depends(get_ascolour_connector)
):
    """Global colour name -> hex lookup."""
    try:
        return connector.get_colours()
    except AsColourAPIError as e:
        logger.error(f"Error fetching colours: {e}")
        return _error_response(e, "Failed to fetch colours")


@router.get("/inventory/items")
def get_inventory_items(
    skuFilter: Optional[str] = Query(None, description="SKU wildcard, e.g. 5001-WHITE or 5001-*"),
    connector: AsColourConnector = Depends(get_ascolour_connector)
):
    """
    Inventory by SKU filter.

    Unlike the other catalog routes the upstream array is wrapped as
    `{ data, success: true }`.
    """
    if not skuFilter:
        return JSONResponse(status_code=400, content={"error": "skuFilter parameter is required"})

    try:
        return connector.get_inventory_items(skuFilter)
    except AsColourAPIError as e:
        logger.error(f"Error fetching inventory items for {skuFilter}: {e}")
        return _error_response(e, "Failed to fetch inventory items")
