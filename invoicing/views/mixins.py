# invoicing/views/mixins.py


class OwnedFormMixin:
    """
    Give create forms an instance that already has its owner, so model
    validation (which requires one) passes during is_valid().
    """

    pass_user_to_form = False

    def get_form_kwargs(self):
        kwargs = super().get_form_kwargs()
        if kwargs.get("instance") is None:
            kwargs["instance"] = self.model(user=self.request.user)
        if self.pass_user_to_form:
            kwargs["user"] = self.request.user
        return kwargs


class CurrentPageMixin:
    current_page = None

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['current_page'] = self.current_page
        return context
