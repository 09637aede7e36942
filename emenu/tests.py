from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIRequestFactory, APITestCase
from rest_framework.views import APIView

from orders.models import Order
from payments.models import PaymentRequest
from staff_calls.models import StaffCall

from .exceptions import first_error_message
from .responses import EnvelopeMixin
from .transitions import validate_transition


class HealthTests(APITestCase):

    def test_health(self):
        response = self.client.get(reverse("health"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "ok")
        self.assertIn("timestamp", response.data)


class ExplodingView(EnvelopeMixin, APIView):

    def get(self, request):
        raise RuntimeError("database on fire")


class ErrorEnvelopeTests(SimpleTestCase):

    def test_unhandled_error_becomes_500_envelope(self):
        request = APIRequestFactory().get("/boom")

        with self.assertLogs("emenu", level="ERROR"):
            response = ExplodingView.as_view()(request)

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {"success": False, "message": "Internal server error"})

    def test_first_error_message(self):
        self.assertEqual(first_error_message({"price": ["Too low"]}), "price: Too low")
        self.assertEqual(first_error_message({"non_field_errors": ["Broken"]}), "Broken")
        self.assertEqual(first_error_message(["Plain"]), "Plain")
        self.assertEqual(
            first_error_message({"items": [{}, {"quantity": ["Must be positive"]}]}),
            "items: quantity: Must be positive"
        )


@override_settings(EMENU_ENFORCE_STATUS_TRANSITIONS=True)
class TransitionTests(SimpleTestCase):

    def test_order_machine(self):
        order = Order(status=Order.PENDING)
        self.assertEqual(validate_transition(order, Order.CONFIRMED), Order.CONFIRMED)

        order.status = Order.CONFIRMED
        with self.assertRaises(ValidationError):
            validate_transition(order, Order.PENDING)

        order.status = Order.CANCELLED
        with self.assertRaises(ValidationError):
            validate_transition(order, Order.COMPLETED)

    def test_staff_call_machine(self):
        call = StaffCall(status=StaffCall.PENDING)
        self.assertEqual(validate_transition(call, StaffCall.COMPLETED), StaffCall.COMPLETED)

        call.status = StaffCall.ACKNOWLEDGED
        with self.assertRaises(ValidationError):
            validate_transition(call, StaffCall.PENDING)

    def test_payment_request_machine(self):
        request = PaymentRequest(status=PaymentRequest.PROCESSING)
        self.assertEqual(
            validate_transition(request, PaymentRequest.COMPLETED), PaymentRequest.COMPLETED
        )

        request.status = PaymentRequest.COMPLETED
        with self.assertRaises(ValidationError):
            validate_transition(request, PaymentRequest.PROCESSING)

    def test_same_status_always_allowed(self):
        order = Order(status=Order.CANCELLED)

        self.assertEqual(validate_transition(order, Order.CANCELLED), Order.CANCELLED)

    @override_settings(EMENU_ENFORCE_STATUS_TRANSITIONS=False)
    def test_enforcement_can_be_disabled(self):
        order = Order(status=Order.COMPLETED)

        self.assertEqual(validate_transition(order, Order.PENDING), Order.PENDING)
        with self.assertRaises(ValidationError):
            validate_transition(order, "LOST")
