"""Transformer from reservations to Smoobu booking payloads."""

from typing import Any

from direct_booking.models.reservation import Reservation


class BookingTransformer:
    """Build the Smoobu ``POST /reservations`` body that blocks a stay's dates."""

    @staticmethod
    def transform(
        reservation: Reservation,
        apartment_id: str,
        channel_id: int,
    ) -> dict[str, Any]:
        """Transform a reservation into a Smoobu booking.

        Args:
            reservation: Paid reservation whose dates should be blocked
            apartment_id: Smoobu apartment id
            channel_id: Smoobu channel used for direct bookings

        Returns:
            JSON-serializable request body
        """
        body: dict[str, Any] = {
            "arrivalDate": reservation.arrival_date.isoformat(),
            "departureDate": reservation.departure_date.isoformat(),
            "apartmentId": int(apartment_id),
            "channelId": channel_id,
            "firstName": reservation.first_name,
            "lastName": reservation.last_name,
            "email": reservation.email,
            "adults": reservation.guests or 2,
            "notice": f"Réservation #{reservation.id} via au-marais.fr",
            "price": float(reservation.amount_due),
        }
        if reservation.phone:
            body["phone"] = reservation.phone
        return body
