from .protocols import BenefitsAPI, CatalogClient, ProductsAPI

__all__ = ["BenefitsAPI", "CatalogClient", "ProductsAPI"]
