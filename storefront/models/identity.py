"""Shopper identity models"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class AuthUser:
    """Authenticated user as reported by Supabase Auth"""
    id: str
    email: Optional[str] = None


@dataclass
class Profile:
    """Contact and address fields from the profiles table"""
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    street_address: Optional[str] = None
    house_number: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "Profile":
        return cls(
            id=row["id"],
            first_name=row.get("first_name"),
            last_name=row.get("last_name"),
            phone=row.get("phone"),
            street_address=row.get("street_address"),
            house_number=row.get("house_number"),
            postal_code=row.get("postal_code"),
            city=row.get("city"),
            country=row.get("country"),
        )


@dataclass
class DeliveryAddress:
    """Preferred delivery address handed to the checkout"""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address1: Optional[str] = None
    city: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None

    def to_input(self) -> dict:
        """Storefront MailingAddressInput, blank fields omitted"""
        fields = {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "address1": self.address1,
            "city": self.city,
            "zip": self.zip,
            "country": self.country,
        }
        return {k: v for k, v in fields.items() if v}


@dataclass
class BuyerIdentity:
    """Checkout pre-fill data built fresh for every checkout attempt"""
    email: Optional[str] = None
    phone: Optional[str] = None
    country_code: Optional[str] = None
    delivery_address: Optional[DeliveryAddress] = None

    def to_input(self) -> dict:
        """Storefront CartBuyerIdentityInput"""
        data: dict = {}
        if self.email:
            data["email"] = self.email
        if self.phone:
            data["phone"] = self.phone
        if self.country_code:
            data["countryCode"] = self.country_code
        if self.delivery_address:
            data["deliveryAddressPreferences"] = [
                {"deliveryAddress": self.delivery_address.to_input()}
            ]
        return data
