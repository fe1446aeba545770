# -*- coding: utf-8 -*-
"""
storefront_checkout/payloads.py

목적:
- 스토어프론트 checkout formData 를 결제사 요청 형태로 변환한다.
  - NOWPayments: invoice JSON
  - Stripe: Checkout Session 파라미터(line_items 포함)

주의:
- 금액(subtotal/shipping/insurance)은 클라이언트가 보낸 값을 그대로 신뢰한다.
  카탈로그 기준 서버 재계산은 하지 않는다.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

from .utils import FormDataError

MSG_MISSING_FORM_DATA = "Missing required form data"
MSG_ACH_USD_ONLY = "ACH payments only support USD currency."

# Stripe 배송지 수집 허용 국가
ALLOWED_SHIPPING_COUNTRIES = [
    "US", "CA", "GB", "AU", "PL", "FR", "ES", "DE", "IT", "NL", "BE", "AT", "IE", "PT",
]

CRYPTO_SECTIONS = ("pricing", "product", "customer")
STRIPE_SECTIONS = ("pricing", "product")


def require_form_data(form_data: Any, sections: Iterable[str]) -> Dict[str, Any]:
    """필수 섹션이 모두 있는지 확인하고 formData 를 그대로 반환."""
    if not isinstance(form_data, dict) or not form_data:
        raise FormDataError(MSG_MISSING_FORM_DATA, stage="Validate")
    for name in sections:
        if not form_data.get(name):
            raise FormDataError(
                MSG_MISSING_FORM_DATA, stage="Validate", order_ref=form_data.get("orderRef")
            )
    pricing = form_data.get("pricing")
    if not isinstance(pricing, dict) or not str(pricing.get("currency") or "").strip():
        raise FormDataError(
            MSG_MISSING_FORM_DATA, stage="Validate", order_ref=form_data.get("orderRef")
        )
    return form_data


def resolve_base_url(origin: Optional[str], referer: Optional[str], default: str) -> str:
    """Origin -> Referer -> 기본 사이트 주소 순으로 선택, 끝의 '/' 하나 제거."""
    base = origin or referer or default
    if base.endswith("/"):
        base = base[:-1]
    return base


def _number(value: Any, label: str) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise FormDataError(f"Invalid {label}", stage="Validate")
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise FormDataError(f"Invalid {label}", stage="Validate")
    # "Infinity" / "NaN" (JSON 토큰 포함) 은 금액/수량이 될 수 없음
    if not math.isfinite(result):
        raise FormDataError(f"Invalid {label}", stage="Validate")
    return result


def to_minor_units(value: float) -> int:
    """금액 -> 센트 단위 정수 (half-up 반올림)."""
    return int(math.floor(value * 100 + 0.5))


def _currency(form_data: Dict[str, Any]) -> str:
    return str(form_data["pricing"]["currency"]).strip()


def _ref(form_data: Dict[str, Any]) -> str:
    ref = form_data.get("orderRef")
    return quote(str(ref), safe="") if ref is not None else ""


def build_invoice_data(form_data: Dict[str, Any], base_url: str) -> Dict[str, Any]:
    """NOWPayments /v1/invoice 요청 body."""
    pricing = form_data["pricing"]
    product = form_data["product"]
    name = product.get("name") or ""
    specs = product.get("specs")
    description = f"{name} {'- ' + specs if specs else ''}".strip()

    return {
        "price_amount": pricing.get("total"),
        "price_currency": _currency(form_data).lower(),
        "order_id": form_data.get("orderRef"),
        "order_description": description,
        "ipn_callback_url": f"{base_url}/api/crypto-webhook",
        "success_url": f"{base_url}/success.html?ref={_ref(form_data)}",
        "cancel_url": f"{base_url}/payment.html",
        # 생성 시점 환율 고정, 수수료는 판매자 부담
        "is_fixed_rate": True,
        "is_fee_paid_by_user": False,
    }


def _quantity(product: Dict[str, Any]) -> int:
    qty = _number(product.get("quantity"), "product quantity")
    if not qty:
        return 1
    if qty < 0 or qty != int(qty):
        raise FormDataError("Invalid product quantity", stage="Validate")
    return int(qty)


def _shipping_method(form_data: Dict[str, Any]) -> Optional[str]:
    shipping = form_data.get("shipping")
    if isinstance(shipping, dict):
        return shipping.get("method")
    return None


def build_line_items(form_data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Stripe line_items: 상품 + (배송비) + (보험)."""
    pricing = form_data["pricing"]
    product = form_data["product"]
    currency = _currency(form_data).lower()
    quantity = _quantity(product)

    subtotal = _number(pricing.get("subtotal"), "subtotal")
    if not subtotal:
        base_price = _number(product.get("basePrice"), "base price") or 0.0
        subtotal = base_price * quantity

    image_url = product.get("imageUrl")
    items = [
        {
            "price_data": {
                "currency": currency,
                "product_data": {
                    "name": product.get("name"),
                    "description": product.get("specs") or "",
                    "images": [image_url] if image_url else [],
                },
                "unit_amount": to_minor_units(subtotal / quantity),
            },
            "quantity": quantity,
        }
    ]

    shipping = _number(pricing.get("shipping"), "shipping")
    if shipping and shipping > 0:
        express = _shipping_method(form_data) == "express"
        items.append(
            {
                "price_data": {
                    "currency": currency,
                    "product_data": {
                        "name": "Express Shipping (2-5 days)" if express else "Standard Shipping",
                        "description": "Fast delivery" if express else "Standard delivery",
                    },
                    "unit_amount": to_minor_units(shipping),
                },
                "quantity": 1,
            }
        )

    insurance = _number(pricing.get("insurance"), "insurance")
    if insurance and insurance > 0:
        items.append(
            {
                "price_data": {
                    "currency": currency,
                    "product_data": {
                        "name": "Order Insurance",
                        "description": "Protection for your order",
                    },
                    "unit_amount": to_minor_units(insurance),
                },
                "quantity": 1,
            }
        )

    return items


def _customer_name(customer: Dict[str, Any]) -> str:
    parts = [customer.get("firstName"), customer.get("lastName")]
    return " ".join(str(p) for p in parts if p)


def build_session_config(
    form_data: Dict[str, Any], base_url: str, payment_type: str = "card"
) -> Dict[str, Any]:
    """Stripe POST /v1/checkout/sessions 파라미터."""
    pricing = form_data["pricing"]
    customer = form_data.get("customer") or {}

    config: Dict[str, Any] = {
        "mode": "payment",
        "line_items": build_line_items(form_data),
        "customer_email": customer.get("email"),
        "metadata": {
            "orderRef": form_data.get("orderRef"),
            "customerName": _customer_name(customer),
            "phone": customer.get("phone"),
            "shippingMethod": _shipping_method(form_data) or "standard",
            "insurance": "yes" if pricing.get("insurance") else "no",
        },
        "success_url": (
            f"{base_url}/success.html?session_id={{CHECKOUT_SESSION_ID}}&ref={_ref(form_data)}"
        ),
        "cancel_url": f"{base_url}/payment.html",
    }

    if payment_type == "ach":
        if _currency(form_data).upper() != "USD":
            raise FormDataError(
                MSG_ACH_USD_ONLY, stage="Validate", order_ref=form_data.get("orderRef")
            )
        config["payment_method_types"] = ["us_bank_account"]
        config["payment_method_options"] = {
            "us_bank_account": {
                "financial_connections": {
                    "permissions": ["payment_method", "balances"],
                },
                "verification_method": "automatic",
            },
        }
    else:
        config["payment_method_types"] = ["card"]

    config["shipping_address_collection"] = {
        "allowed_countries": list(ALLOWED_SHIPPING_COUNTRIES),
    }
    return config
