import pytest

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_card_number_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "card 4111 1111 1111 1111 declined"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "4111 1111 1111 1111" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_password_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]
        assert "***MASKED***" in result["header"]

    def test_md5sig_in_text_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "md5sig=0A1B2C3D4E5F"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "0A1B2C3D4E5F" not in result["data"]

    @pytest.mark.parametrize("key", ["secret", "md5sig", "hash", "merchant_secret"])
    def test_sensitive_keys_masked(self, key):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", key: "value-to-hide"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result[key] == "***MASKED***"

    def test_non_sensitive_data_unchanged(self):
        from config.settings import mask_sensitive_data

        event_dict = {
            "event": "order.placed",
            "order_number": "ORD-20260101-ABC123",
            "total": "1399.00",
            "phone": "0771234567",
        }
        result = mask_sensitive_data(None, None, dict(event_dict))
        assert result == event_dict

    def test_numeric_order_number_suffix_unchanged(self):
        from config.settings import mask_sensitive_data

        event_dict = {
            "event": "checkout.completed",
            "order_number": "ORD-20260101-123456",
        }
        result = mask_sensitive_data(None, None, dict(event_dict))
        assert result == event_dict

    def test_hyphenated_card_number_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "card_no 5500-0000-0000-0004"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "5500-0000-0000-0004" not in result["data"]
