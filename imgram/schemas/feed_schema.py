from imgram.extensions.extensions import ma


class FeedCommentSchema(ma.Schema):
    id = ma.Int()
    user_id = ma.Int()
    text = ma.Str()
    created_at = ma.DateTime()


class FeedPostSchema(ma.Schema):
    id = ma.Int()
    user_id = ma.Int()
    caption = ma.Str()
    filepath = ma.Str()
    created_at = ma.DateTime()
    comments = ma.List(ma.Nested(FeedCommentSchema))
