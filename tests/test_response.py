from app.utils.response import success_response, error_response, operation_summary


def test_success_response_with_data():
    result = success_response(data={"key": "value"})
    assert result == {"status": "success", "data": {"key": "value"}, "message": None}


def test_success_response_with_message():
    result = success_response(data=None, message="Vehicle deleted")
    assert result == {"status": "success", "data": None, "message": "Vehicle deleted"}


def test_error_response():
    result = error_response("Task validation failed")
    assert result == {"status": "error", "data": None, "message": "Task validation failed"}


def test_error_response_with_data():
    result = error_response("Invalid vehicle", data={"errors": ["Fuel sensors cannot exceed fuel tanks"]})
    assert result["data"] == {"errors": ["Fuel sensors cannot exceed fuel tanks"]}


def test_operation_summary():
    assert operation_summary(2, 1, ["Task T9 not found"]) == {
        "success": 2, "failed": 1, "errors": ["Task T9 not found"],
    }
