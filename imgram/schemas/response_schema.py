from imgram.extensions.extensions import ma


class ResponseSchema(ma.Schema):
    data = ma.Raw(allow_none=True)
    cursor = ma.Int()
    error = ma.Str()


def envelope(data=None, cursor=0, error=""):
    return ResponseSchema().dump({
        "data": data,
        "cursor": cursor,
        "error": error,
    })
