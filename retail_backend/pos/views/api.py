# pos/views/api.py

"""
POS API VIEWS

Purpose:
- Active cart lifecycle for the authenticated seller
- Add/update/remove/clear lines (server-owned tier pricing)
- Client selection for the sale
- Split-entry helper (clamps wallet entries to the balance)
- Checkout: settle payment, then confirm the cart as a folio

Hard rules:
- Money is server-owned: price tier and amounts are resolved from the product.
- Wallet shortfalls are never split automatically; the response carries a
  proposal the caller can re-submit as a multiple payment.
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from clients.models import Client
from loyalty.services.ledger import InsufficientWalletBalanceError, WalletNotEligibleError
from permissions.roles import PERM_SALES_CREATE, HasPermission
from pos.models import CartItem
from pos.serializers import CartSerializer
from pos.services.cart_service import (
    CartError,
    CartInactiveError,
    EmptyCartError,
    add_line,
    clear_cart,
    get_active_cart,
    remove_line,
    set_cart_client,
    update_line_quantity,
)
from products.models import Product
from products.services.stock import InsufficientStockError
from sales.models.sale import PAYMENT_MULTIPLE
from sales.serializers import FolioDetailSerializer
from sales.services.checkout_orchestrator import checkout_cart, wallet_state_for
from sales.services.folio_service import FolioError, folio_summary
from sales.services.settlement import (
    SETTLEMENT_METHODS,
    SINGLE_METHODS,
    InvalidPaymentMethodError,
    SettlementError,
    SplitMismatchError,
    WalletBlockedError,
    WalletShortfallError,
    enter_split_amount,
)
from store.services.context import build_context


# =====================================================
# SWAGGER INPUT SERIALIZERS
# =====================================================

class AddCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField()
    is_correction = serializers.BooleanField(required=False, default=False)
    correction_note = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_quantity(self, value):
        if value == 0:
            raise serializers.ValidationError("quantity cannot be zero")
        return value


class UpdateCartItemInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()

    def validate_quantity(self, value):
        if value == 0:
            raise serializers.ValidationError("quantity cannot be zero")
        return value


class CartClientInputSerializer(serializers.Serializer):
    client_id = serializers.UUIDField(allow_null=True)


class SplitEntryInputSerializer(serializers.Serializer):
    splits = serializers.DictField(
        child=serializers.DecimalField(max_digits=12, decimal_places=2),
        required=False,
        default=dict,
    )
    method = serializers.ChoiceField(choices=list(SINGLE_METHODS))
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class CheckoutCartInputSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=list(SETTLEMENT_METHODS), default="cash")
    splits = serializers.DictField(
        child=serializers.DecimalField(max_digits=12, decimal_places=2),
        required=False,
        allow_empty=True,
    )

    def validate(self, attrs):
        if attrs.get("payment_method") == PAYMENT_MULTIPLE and not attrs.get("splits"):
            raise serializers.ValidationError({"splits": "Required when payment_method is multiple"})
        return attrs


# =====================================================
# API ERROR NORMALIZATION
# =====================================================

def error_response(*, code: str, message: str, http_status: int, **extra):
    body = {"error": {"code": code, "message": message}}
    body.update(extra)
    return Response(body, status=http_status)


def _cart_response(cart, http_status=status.HTTP_200_OK):
    cart.refresh_from_db()
    return Response(CartSerializer(cart).data, status=http_status)


# =====================================================
# POS API VIEWS
# =====================================================

class POSHealthCheckView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = None

    @extend_schema(
        responses={200: dict},
        description="POS module health check",
    )
    def get(self, request):
        return Response(
            {
                "status": "ok",
                "module": "pos",
                "user": request.user.email,
                "role": request.user.role,
            }
        )


class POSBaseView(APIView):
    permission_classes = [IsAuthenticated, HasPermission]
    required_permission = PERM_SALES_CREATE
    serializer_class = CartSerializer


class ActiveCartView(POSBaseView):
    """
    Retrieve or create the authenticated user's active cart.
    """

    @extend_schema(responses={200: CartSerializer})
    def get(self, request):
        cart = get_active_cart(ctx=build_context(request.user))
        return Response(CartSerializer(cart).data, status=status.HTTP_200_OK)


class AddCartItemView(POSBaseView):
    """
    Add a product to the active cart.

    Same SKU + same correction flag merges into the existing line.
    """

    @extend_schema(
        request=AddCartItemInputSerializer,
        responses={200: CartSerializer},
        examples=[
            OpenApiExample(
                "Return 2 units",
                value={
                    "product_id": "07d0722f-92fd-4a83-b84e-6e25f034a647",
                    "quantity": 2,
                    "is_correction": True,
                    "correction_note": "Envase dañado",
                },
                request_only=True,
            ),
        ],
    )
    def post(self, request):
        serializer = AddCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        product = get_object_or_404(Product, id=data["product_id"])
        ctx = build_context(request.user)
        cart = get_active_cart(ctx=ctx)

        try:
            add_line(
                ctx=ctx,
                cart=cart,
                product=product,
                quantity=data["quantity"],
                is_correction=data["is_correction"],
                correction_note=data["correction_note"],
            )
        except CartError as exc:
            return error_response(
                code="INVALID_CART_LINE",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        return _cart_response(cart)


class UpdateCartItemView(POSBaseView):
    """
    Change the quantity of a cart line; the tier is re-resolved from the
    product's current prices.
    """

    @extend_schema(request=UpdateCartItemInputSerializer, responses={200: CartSerializer})
    def patch(self, request, item_id):
        serializer = UpdateCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ctx = build_context(request.user)
        cart = get_active_cart(ctx=ctx)
        item = get_object_or_404(CartItem, id=item_id, cart=cart)

        try:
            update_line_quantity(ctx=ctx, item=item, quantity=serializer.validated_data["quantity"])
        except CartError as exc:
            return error_response(
                code="INVALID_CART_LINE",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        return _cart_response(cart)


class RemoveCartItemView(POSBaseView):
    @extend_schema(responses={200: CartSerializer})
    def delete(self, request, item_id):
        cart = get_active_cart(ctx=build_context(request.user))
        item = get_object_or_404(CartItem, id=item_id, cart=cart)

        remove_line(item=item)

        return _cart_response(cart)


class ClearCartView(POSBaseView):
    @extend_schema(responses={200: CartSerializer})
    def delete(self, request):
        cart = get_active_cart(ctx=build_context(request.user))
        clear_cart(cart=cart)
        return _cart_response(cart)


class CartClientView(POSBaseView):
    """
    Select the client for the sale (null = general client).
    """

    @extend_schema(request=CartClientInputSerializer, responses={200: CartSerializer})
    def put(self, request):
        serializer = CartClientInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        client = None
        client_id = serializer.validated_data.get("client_id")
        if client_id:
            client = get_object_or_404(Client, pk=client_id)

        cart = get_active_cart(ctx=build_context(request.user))
        set_cart_client(cart=cart, client=client)

        return _cart_response(cart)


class SplitEntryView(POSBaseView):
    """
    Apply one split entry the way the payment form does while typing.
    Negative amounts clamp to 0; the wallet entry clamps to the balance and
    the shortfall is reported back.
    """

    @extend_schema(request=SplitEntryInputSerializer, responses={200: dict})
    def post(self, request):
        serializer = SplitEntryInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        cart = get_active_cart(ctx=build_context(request.user))

        try:
            entry = enter_split_amount(
                data.get("splits") or {},
                data["method"],
                data["amount"],
                wallet=wallet_state_for(cart.client),
            )
        except InvalidPaymentMethodError as exc:
            return error_response(
                code="INVALID_PAYMENT_METHOD",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        split_sum = sum(entry.splits.values())
        return Response(
            {
                "splits": {k: str(v) for k, v in entry.splits.items()},
                "requested": str(entry.requested),
                "accepted": str(entry.accepted),
                "shortfall": str(entry.shortfall),
                "split_sum": str(split_sum),
                "remaining": str(cart.total_amount - split_sum),
            }
        )


class CheckoutCartView(POSBaseView):
    """
    Checkout the active cart into a new folio.

    Calls:
    - sales.services.checkout_orchestrator.checkout_cart()
    """

    @extend_schema(
        request=CheckoutCartInputSerializer,
        responses={201: FolioDetailSerializer},
        description="Settle payment and confirm the active cart as a new folio.",
        examples=[
            OpenApiExample(
                "Single payment (cash)",
                value={"payment_method": "cash"},
                request_only=True,
            ),
            OpenApiExample(
                "Split payment (cash + wallet)",
                value={
                    "payment_method": "multiple",
                    "splits": {"cash": "150.00", "wallet": "50.00"},
                },
                request_only=True,
            ),
        ],
    )
    def post(self, request):
        serializer = CheckoutCartInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        ctx = build_context(request.user)
        cart = get_active_cart(ctx=ctx)

        try:
            confirmed = checkout_cart(
                ctx=ctx,
                cart=cart,
                payment_method=data["payment_method"],
                splits=data.get("splits"),
            )
        except EmptyCartError as exc:
            return error_response(
                code="EMPTY_CART",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )
        except CartInactiveError as exc:
            return error_response(
                code="CART_CLOSED",
                message=str(exc),
                http_status=status.HTTP_409_CONFLICT,
            )
        except WalletShortfallError as exc:
            return error_response(
                code="INSUFFICIENT_WALLET_BALANCE",
                message=str(exc),
                http_status=status.HTTP_409_CONFLICT,
                proposal=exc.proposal.as_dict(),
            )
        except (WalletBlockedError, WalletNotEligibleError) as exc:
            return error_response(
                code="WALLET_NOT_ACTIVE",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )
        except InsufficientWalletBalanceError as exc:
            return error_response(
                code="INSUFFICIENT_WALLET_BALANCE",
                message=str(exc),
                http_status=status.HTTP_409_CONFLICT,
                requested=str(exc.requested),
                available=str(exc.available),
                shortfall=str(exc.shortfall),
            )
        except SplitMismatchError as exc:
            return error_response(
                code="SPLIT_MISMATCH",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )
        except InsufficientStockError as exc:
            return error_response(
                code="INSUFFICIENT_STOCK",
                message=str(exc),
                http_status=status.HTTP_409_CONFLICT,
            )
        except (SettlementError, FolioError, CartError) as exc:
            return error_response(
                code="CHECKOUT_FAILED",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        payload = FolioDetailSerializer(folio_summary(confirmed.folio)).data
        return Response(payload, status=status.HTTP_201_CREATED)
