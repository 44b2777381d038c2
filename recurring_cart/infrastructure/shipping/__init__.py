from .flat_rate_shipping import FlatRateShippingService, ShippingMethod

__all__ = ['FlatRateShippingService', 'ShippingMethod']
