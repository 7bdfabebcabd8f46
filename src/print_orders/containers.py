"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from print_orders.adapters.supabase_cart_repository import SupabaseCartRepository
from print_orders.adapters.supabase_order_repository import SupabaseOrderRepository
from print_orders.adapters.supabase_photo_repository import SupabasePhotoRepository
from print_orders.adapters.supabase_print_size_repository import (
    SupabasePrintSizeRepository,
)
from print_orders.adapters.supabase_sequence_repository import (
    SupabaseSequenceRepository,
)
from print_orders.adapters.supabase_settings_repository import (
    SupabaseSettingsRepository,
)
from print_orders.adapters.supabase_storage_blob_store import (
    SupabaseStorageBlobStore,
)
from print_orders.config import Settings
from print_orders.services.admin import AdminService
from print_orders.services.cart import ShoppingCartService
from print_orders.services.orders import OrderService
from print_orders.services.payments import (
    Base64CardDecryptor,
    DeferredPaymentProcessor,
    PaymentService,
)
from print_orders.services.photos import PhotoLifecycleService
from print_orders.services.pricing import PricingService
from print_orders.services.sequences import SequenceGenerator
from print_orders.services.tax import SettingsTaxCalculator, TaxCalculator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    sequence_generator: SequenceGenerator
    pricing_service: PricingService
    photo_service: PhotoLifecycleService
    cart_service: ShoppingCartService
    tax_calculator: TaxCalculator
    payment_service: PaymentService
    order_service: OrderService
    admin_service: AdminService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    settings_repository = SupabaseSettingsRepository(supabase_client)
    sequence_generator = SequenceGenerator(
        repository=SupabaseSequenceRepository(supabase_client),
        retry_attempts=resolved_settings.sequence_retry_attempts,
        retry_delay_seconds=resolved_settings.sequence_retry_delay_seconds,
    )
    pricing_service = PricingService(SupabasePrintSizeRepository(supabase_client))
    photo_service = PhotoLifecycleService(
        repository=SupabasePhotoRepository(supabase_client),
        blob_store=SupabaseStorageBlobStore(
            supabase_client, bucket=resolved_settings.photo_bucket
        ),
    )
    cart_service = ShoppingCartService(
        repository=SupabaseCartRepository(supabase_client),
        photo_service=photo_service,
        pricing_service=pricing_service,
        estimate_tax_rate=resolved_settings.estimate_tax_rate,
        max_quantity=resolved_settings.max_line_quantity,
        cart_ttl_days=resolved_settings.cart_ttl_days,
    )
    tax_calculator = SettingsTaxCalculator(settings_repository)
    payment_service = PaymentService(
        decryptor=Base64CardDecryptor(),
        processor=DeferredPaymentProcessor(),
        settings_repository=settings_repository,
    )
    order_service = OrderService(
        repository=SupabaseOrderRepository(supabase_client),
        cart_service=cart_service,
        photo_service=photo_service,
        payment_service=payment_service,
        tax_calculator=tax_calculator,
        sequence_generator=sequence_generator,
        photo_retention_days=resolved_settings.photo_retention_days,
    )
    admin_service = AdminService(
        order_service=order_service,
        photo_service=photo_service,
        cart_service=cart_service,
    )
    return AppContainer(
        settings=resolved_settings,
        sequence_generator=sequence_generator,
        pricing_service=pricing_service,
        photo_service=photo_service,
        cart_service=cart_service,
        tax_calculator=tax_calculator,
        payment_service=payment_service,
        order_service=order_service,
        admin_service=admin_service,
    )
