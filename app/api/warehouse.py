"""Warehouse (bulk storage) API endpoints"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.models.stock import Stock, WarehouseProduct, WarehouseMovement
from app.models.user import User, RestaurantRole
from app.schemas.stock import (
    WarehouseProductCreate,
    WarehouseProductResponse,
    WarehouseEntry,
    WarehouseTransfer,
    WarehouseAdjustment,
    WarehouseMovementResponse,
    TransferResponse,
    WarehouseStats,
)
from app.services.stock import TRANSFER, load_stocked_products, record_stock_change
from app.subscription.dependencies import require_feature

router = APIRouter()
logger = structlog.get_logger()


async def get_warehouse_product(db: AsyncSession, restaurant_id: UUID, warehouse_product_id: UUID) -> WarehouseProduct:
    result = await db.execute(
        select(WarehouseProduct).where(
            WarehouseProduct.id == warehouse_product_id,
            WarehouseProduct.restaurant_id == restaurant_id,
        )
    )
    warehouse_product = result.scalar_one_or_none()
    if not warehouse_product:
        raise HTTPException(status_code=404, detail="Produit d'entrepôt introuvable")
    return warehouse_product


@router.get("/products", response_model=List[WarehouseProductResponse])
async def list_warehouse_products(
    restaurant_id: UUID,
    current_user: User = Depends(require_feature("stock_management")),
    db: AsyncSession = Depends(get_db),
):
    """List warehouse products"""
    result = await db.execute(
        select(WarehouseProduct)
        .where(WarehouseProduct.restaurant_id == restaurant_id)
        .order_by(WarehouseProduct.name)
    )
    return result.scalars().all()


@router.post("/products", response_model=WarehouseProductResponse, status_code=201)
async def create_warehouse_product(
    restaurant_id: UUID,
    product_data: WarehouseProductCreate,
    current_user: User = Depends(require_feature("stock_management", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Create a warehouse product with its opening quantity"""
    if product_data.linked_product_id:
        products = await load_stocked_products(db, restaurant_id, [product_data.linked_product_id])
        if product_data.linked_product_id not in products:
            raise HTTPException(status_code=400, detail="Produit lié invalide")

    fields = product_data.model_dump(exclude={"initial_quantity"})
    warehouse_product = WarehouseProduct(
        restaurant_id=restaurant_id,
        quantity=product_data.initial_quantity,
        **fields,
    )
    db.add(warehouse_product)
    await db.flush()

    if product_data.initial_quantity > 0:
        db.add(WarehouseMovement(
            restaurant_id=restaurant_id,
            warehouse_product_id=warehouse_product.id,
            user_id=current_user.id,
            movement_type="entry",
            quantity=product_data.initial_quantity,
            previous_qty=0,
            new_qty=product_data.initial_quantity,
            unit_cost=product_data.unit_cost,
            supplier_name=product_data.supplier_name,
            notes="Stock initial",
        ))

    await db.commit()
    await db.refresh(warehouse_product)

    return warehouse_product


@router.post("/products/{warehouse_product_id}/entries", response_model=WarehouseMovementResponse, status_code=201)
async def add_warehouse_entry(
    restaurant_id: UUID,
    warehouse_product_id: UUID,
    entry: WarehouseEntry,
    current_user: User = Depends(require_feature("stock_management", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Record goods received"""
    if entry.quantity <= 0:
        raise HTTPException(status_code=400, detail="La quantité doit être positive")

    warehouse_product = await get_warehouse_product(db, restaurant_id, warehouse_product_id)
    previous_qty = warehouse_product.quantity or 0
    warehouse_product.quantity = previous_qty + entry.quantity
    if entry.unit_cost is not None:
        warehouse_product.unit_cost = entry.unit_cost

    movement = WarehouseMovement(
        restaurant_id=restaurant_id,
        warehouse_product_id=warehouse_product.id,
        user_id=current_user.id,
        movement_type="entry",
        quantity=entry.quantity,
        previous_qty=previous_qty,
        new_qty=warehouse_product.quantity,
        unit_cost=entry.unit_cost,
        supplier_name=entry.supplier_name,
        invoice_number=entry.invoice_number,
        notes=entry.notes,
    )
    db.add(movement)
    await db.commit()

    return movement


@router.post("/transfers", response_model=TransferResponse, status_code=201)
async def transfer_to_operations(
    restaurant_id: UUID,
    transfer: WarehouseTransfer,
    current_user: User = Depends(require_feature("stock_management", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Move warehouse quantity into sellable stock using the conversion ratio"""
    if transfer.quantity <= 0:
        raise HTTPException(status_code=400, detail="La quantité doit être positive")

    warehouse_product = await get_warehouse_product(db, restaurant_id, transfer.warehouse_product_id)
    if transfer.quantity > (warehouse_product.quantity or 0):
        raise HTTPException(status_code=400, detail="Quantité insuffisante en entrepôt")

    target_id = transfer.target_product_id or warehouse_product.linked_product_id
    if target_id is None:
        raise HTTPException(status_code=400, detail="Aucun produit de destination")

    products = await load_stocked_products(db, restaurant_id, [target_id])
    product = products.get(target_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Produit introuvable")

    if product.stock is None:
        product.stock = Stock(restaurant_id=restaurant_id, product_id=product.id, quantity=0)

    operational_qty = int(round(transfer.quantity * (warehouse_product.conversion_ratio or 1)))

    previous_qty = warehouse_product.quantity
    warehouse_product.quantity = previous_qty - transfer.quantity
    db.add(WarehouseMovement(
        restaurant_id=restaurant_id,
        warehouse_product_id=warehouse_product.id,
        user_id=current_user.id,
        movement_type="transfer_to_ops",
        quantity=-transfer.quantity,
        previous_qty=previous_qty,
        new_qty=warehouse_product.quantity,
        destination_product_id=product.id,
        notes=transfer.notes,
    ))

    record_stock_change(
        db,
        product,
        (product.stock.quantity or 0) + operational_qty,
        TRANSFER,
        user_id=current_user.id,
        reason=f"Transfert depuis l'entrepôt : {warehouse_product.name}",
    )

    await db.commit()

    logger.info(
        "Warehouse transfer",
        restaurant_id=str(restaurant_id),
        warehouse_product_id=str(warehouse_product.id),
        product_id=str(product.id),
        quantity=transfer.quantity,
        operational_quantity=operational_qty,
    )

    return TransferResponse(
        warehouse_product=WarehouseProductResponse.model_validate(warehouse_product),
        product_id=product.id,
        transferred_quantity=transfer.quantity,
        operational_quantity=operational_qty,
        new_stock_quantity=product.stock.quantity,
    )


@router.post("/products/{warehouse_product_id}/adjust", response_model=WarehouseProductResponse)
async def adjust_warehouse_product(
    restaurant_id: UUID,
    warehouse_product_id: UUID,
    adjustment: WarehouseAdjustment,
    current_user: User = Depends(require_feature("stock_management", RestaurantRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Inventory correction"""
    if adjustment.new_quantity < 0:
        raise HTTPException(status_code=400, detail="La quantité ne peut pas être négative")

    warehouse_product = await get_warehouse_product(db, restaurant_id, warehouse_product_id)
    previous_qty = warehouse_product.quantity or 0
    warehouse_product.quantity = adjustment.new_quantity

    db.add(WarehouseMovement(
        restaurant_id=restaurant_id,
        warehouse_product_id=warehouse_product.id,
        user_id=current_user.id,
        movement_type="adjustment",
        quantity=adjustment.new_quantity - previous_qty,
        previous_qty=previous_qty,
        new_qty=adjustment.new_quantity,
        notes=adjustment.notes,
    ))
    await db.commit()
    await db.refresh(warehouse_product)

    return warehouse_product


@router.get("/stats", response_model=WarehouseStats)
async def get_warehouse_stats(
    restaurant_id: UUID,
    current_user: User = Depends(require_feature("stock_management")),
    db: AsyncSession = Depends(get_db),
):
    """Warehouse totals and low-stock count"""
    result = await db.execute(
        select(WarehouseProduct).where(WarehouseProduct.restaurant_id == restaurant_id)
    )
    warehouse_products = result.scalars().all()

    return WarehouseStats(
        total_products=len(warehouse_products),
        low_stock_count=sum(
            1 for wp in warehouse_products if (wp.quantity or 0) <= (wp.alert_threshold or 0)
        ),
        total_value=int(sum((wp.quantity or 0) * (wp.unit_cost or 0) for wp in warehouse_products)),
    )
