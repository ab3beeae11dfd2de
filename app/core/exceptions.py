class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class PlatformServiceError(BaseServiceError):
    """Base exception for platform service errors."""
    pass

class ShopifyServiceError(PlatformServiceError):
    """Base exception for Shopify-specific errors."""
    pass

class ShopifyAPIError(ShopifyServiceError):
    """Raised when Shopify API calls fail."""
    pass

class ShopifyGraphQLError(ShopifyAPIError):
    """Raised when a GraphQL response carries top-level errors."""
    def __init__(self, errors):
        self.errors = errors
        message = "GraphQL query failed with errors:\n"
        for error in errors:
            msg = error.get('message', 'Unknown error')
            path = error.get('path', [])
            message += f"- Message: {msg}, Path: {path}\n"
        super().__init__(message)

class VisibilityUpdateError(ShopifyServiceError):
    """Raised when a metafieldsSet mutation returns user errors."""
    def __init__(self, product_id: str, user_errors):
        self.product_id = product_id
        self.user_errors = user_errors or []
        first = self.user_errors[0].get('message', 'Unknown error') if self.user_errors else 'Unknown error'
        super().__init__(first)

class HiddenSetSourceError(BaseServiceError):
    """Raised by a hidden-set source that could not produce data."""
    pass
